"""
Page templates.
Source files and wiring fragments for generated client pages.

Templates:
- static: plain HTML page
- dashboard: SolidJS app with context, event processor and views
- feed: SolidJS list backed by a per-user table and API routes

All content is static strings rendered with the page identifier.
Paths in the returned files are relative to the page directory.
"""
from datetime import datetime

from dolphin.core.naming import Identifier


def _title(ident: Identifier) -> str:
    return " ".join(s.capitalize() for s in ident.raw.split("-"))


# =============================================================================
# Shared files
# =============================================================================

def _app_index_html(ident: Identifier) -> str:
    return f'''<!doctype html>
<html lang="en">
  <head>
    <meta charset="UTF-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>{_title(ident)}</title>
  </head>
  <body>
    <div id="root"></div>
    <script type="module" src="./index.tsx"></script>
  </body>
</html>
'''


def _app_entry(ident: Identifier) -> str:
    return f'''/* @refresh reload */
import {{ render }} from "solid-js/web";
import "../index.css";
import {ident.pascal} from "./{ident.pascal}";

const root = document.getElementById("root");

render(() => <{ident.pascal} />, root!);
'''


# =============================================================================
# Static page
# =============================================================================

def render_static_page(ident: Identifier) -> dict[str, str]:
    """Generate a static HTML page."""
    title = _title(ident)
    year = datetime.now().year
    files = {}

    files["index.html"] = f'''<!doctype html>
<html lang="en">
  <head>
    <meta charset="UTF-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>{title} - Template</title>
    <link
      rel="stylesheet"
      href="https://cdn.jsdelivr.net/npm/basecoat-css@0.3.2/dist/basecoat.cdn.min.css"
    />
    <script
      src="https://cdn.jsdelivr.net/npm/basecoat-css@0.3.2/dist/js/all.min.js"
      defer
    ></script>
    <style>
      body {{
        margin: 0;
        font-family: system-ui, -apple-system, sans-serif;
      }}
      @media (max-width: 768px) {{
        .hero-title {{
          font-size: 3rem !important;
        }}
      }}
    </style>
  </head>
  <body>
    <nav style="display: flex; justify-content: space-between; padding: 0.75rem 1.5rem">
      <a href="/" style="text-decoration: none; color: black; font-weight: 600">Template</a>
      <a href="/dashboard/" class="btn btn-sm">Dashboard</a>
    </nav>

    <section style="text-align: center; padding: 8rem 1.5rem 6rem">
      <h1 class="hero-title" style="font-size: 5rem; font-weight: 800; margin: 0 0 1.5rem 0">
        {title}
      </h1>
      <p style="font-size: 1.5rem; color: #6b7280; margin: 0">
        Welcome to {title}
      </p>
    </section>

    <footer style="padding: 2rem 1.5rem; border-top: 1px solid #e5e7eb">
      <p style="color: #6b7280; font-size: 0.875rem; margin: 0">
        &copy; {year} Template. All rights reserved.
      </p>
    </footer>
  </body>
</html>
'''
    return files


# =============================================================================
# Dashboard page
# =============================================================================

def render_dashboard_page(ident: Identifier, schemas_module: str) -> dict[str, str]:
    """
    Generate a dashboard page.

    Args:
        ident: Page identifier
        schemas_module: Import specifier of the type-schema file, relative
            to the page directory
    """
    p, c, raw = ident.pascal, ident.camel, ident.raw
    title = _title(ident)
    files = {}

    files["index.html"] = _app_index_html(ident)
    files["index.tsx"] = _app_entry(ident)

    files[f"{p}.tsx"] = f'''import {{ Show, Switch, Match, createResource }} from "solid-js";
import {{ authClient }} from "../lib/auth-client";
import {{ apiClient }} from "../clientApi/clientApi";
import {{ {p}Provider, use{p} }} from "./{p}Context";
import {p}Skeleton from "./{p}Skeleton";
import OverviewView from "./OverviewView";
import SettingsView from "./SettingsView";

function {p}Content() {{
  const {{ store, actions }} = use{p}();

  return (
    <div class="min-h-screen">
      <header class="flex h-16 items-center gap-2 border-b px-4">
        <span class="text-sm text-muted-foreground">{title}</span>
        <span class="text-sm text-muted-foreground">/</span>
        <h1 class="text-sm font-semibold capitalize">{{store.currentView}}</h1>
        <nav class="ml-auto flex gap-2">
          <button class="btn btn-ghost" onClick={{() => actions.setCurrentView("overview")}}>
            Overview
          </button>
          <button class="btn btn-ghost" onClick={{() => actions.setCurrentView("settings")}}>
            Settings
          </button>
        </nav>
      </header>

      <div class="p-6">
        <Show when={{!store.isLoading}}>
          <Switch fallback={{<OverviewView />}}>
            <Match when={{store.currentView === "overview"}}>
              <OverviewView />
            </Match>
            <Match when={{store.currentView === "settings"}}>
              <SettingsView />
            </Match>
          </Switch>
        </Show>
      </div>
    </div>
  );
}}

export default function {p}() {{
  const [{c}Data] = createResource(() => apiClient.load{p}());
  const session = authClient.useSession();

  return (
    <Show
      when={{session() && !session().isPending && !{c}Data.loading}}
      fallback={{<{p}Skeleton />}}
    >
      <Show
        when={{session().data?.user}}
        fallback={{
          <div>
            {{(() => {{
              window.location.href = `/login/?redirect=${{window.location.pathname}}`;
              return "Redirecting...";
            }})()}}
          </div>
        }}
      >
        <{p}Provider initialData={{{c}Data()!}} user={{session()!.data!.user!}}>
          <{p}Content />
        </{p}Provider>
      </Show>
    </Show>
  );
}}
'''

    files[f"{p}Context.tsx"] = f'''import {{ createContext, useContext, onCleanup }} from "solid-js";
import {{ createStore }} from "solid-js/store";
import type {{ User }} from "better-auth";
import {{ AutosaveService }} from "../services/AutosaveService";
import type {{ {p}Event }} from "{schemas_module}";
import {{ process{p}EventQueue }} from "./{c}EventProcessor";

export interface {p}Store {{
  user: User;
  currentView: "overview" | "settings";
  isLoading: boolean;
  error: string | null;
  data: unknown;
}}

export interface {p}Actions {{
  setCurrentView: (view: {p}Store["currentView"]) => void;
}}

interface {p}ContextType {{
  store: {p}Store;
  actions: {p}Actions;
  emitEvent: (event: {p}Event) => void;
}}

const {p}Context = createContext<{p}ContextType>();

export function {p}Provider(props: {{ children: any; initialData: unknown; user: User }}) {{
  const [store, setStore] = createStore<{p}Store>({{
    user: props.user,
    currentView: "overview",
    isLoading: false,
    error: null,
    data: props.initialData,
  }});

  const autosave = new AutosaveService<{p}Event>({{
    endpoint: "/api/save",
    onError: (error) => setStore("error", error.message),
    onSave: (events) => process{p}EventQueue(events, store, setStore),
  }});

  const actions: {p}Actions = {{
    setCurrentView: (view) => setStore("currentView", view),
  }};

  const emitEvent = (event: {p}Event) => autosave.addEvent(event);

  onCleanup(() => autosave.destroy());

  return (
    <{p}Context.Provider value={{{{ store, actions, emitEvent }}}}>
      {{props.children}}
    </{p}Context.Provider>
  );
}}

export function use{p}() {{
  const context = useContext({p}Context);
  if (!context) {{
    throw new Error("use{p} must be used within a {p}Provider");
  }}
  return context;
}}
'''

    files[f"{c}EventProcessor.ts"] = f'''import type {{ SetStoreFunction }} from "solid-js/store";
import type {{ {p}Event }} from "{schemas_module}";
import type {{ {p}Store }} from "./{p}Context";

export function process{p}EventQueue(
  events: {p}Event[],
  store: {p}Store,
  setStore: SetStoreFunction<{p}Store>
) {{
  for (const event of events) {{
    process{p}Event(event, store, setStore);
  }}
}}

export function process{p}Event(
  event: {p}Event,
  store: {p}Store,
  setStore: SetStoreFunction<{p}Store>
) {{
  switch (event.type) {{
    case "{ident.screaming_snake}_UPDATED":
      setStore("data", event.payload);
      break;
    default:
      console.warn("Unknown {raw} event type:", event);
  }}
}}
'''

    files["OverviewView.tsx"] = f'''import {{ Component }} from "solid-js";
import {{ use{p} }} from "./{p}Context";

const OverviewView: Component = () => {{
  const {{ store }} = use{p}();

  return (
    <div class="space-y-6">
      <div>
        <h2 class="text-2xl font-bold">{title} Overview</h2>
        <p class="text-muted-foreground">Welcome to your {raw} dashboard, {{store.user.name}}.</p>
      </div>

      <div class="card p-6">
        <h3 class="text-lg font-semibold mb-4">Recent Activity</h3>
        <p class="text-muted-foreground">No recent activity to display.</p>
      </div>
    </div>
  );
}};

export default OverviewView;
'''

    files["SettingsView.tsx"] = f'''import {{ Component, Show }} from "solid-js";
import {{ use{p} }} from "./{p}Context";
import {{ Button }} from "~/components/ui/button";
import {{ Input }} from "~/components/ui/input";
import {{ Label }} from "~/components/ui/label";

const SettingsView: Component = () => {{
  const {{ store }} = use{p}();

  return (
    <div class="space-y-6">
      <div>
        <h2 class="text-2xl font-bold">{title} Settings</h2>
        <p class="text-muted-foreground">Configure your {raw} preferences.</p>
      </div>

      <div class="card p-6 space-y-4">
        <div class="space-y-2">
          <Label for="setting1">Sample Setting</Label>
          <Input id="setting1" placeholder="Enter value..." />
        </div>
        <Show when={{store.error}}>
          <p class="text-sm text-destructive">{{store.error}}</p>
        </Show>
        <Button>Save Settings</Button>
      </div>
    </div>
  );
}};

export default SettingsView;
'''

    files[f"{p}Skeleton.tsx"] = f'''export default function {p}Skeleton() {{
  return (
    <div class="p-6 space-y-4 animate-pulse">
      <div class="h-8 w-48 rounded bg-muted" />
      <div class="h-32 rounded bg-muted" />
    </div>
  );
}}
'''
    return files


def dashboard_route(ident: Identifier) -> str:
    """Load endpoint registered in the server route file."""
    return f'''// {_title(ident)} dashboard
app.get("/api/load/{ident.raw}", authMiddleware, async (c) => {{
  const userId = c.get("userId");
  const data = {{
    userId,
  }};
  return c.json(data);
}});
'''


def dashboard_route_marker(ident: Identifier) -> str:
    return f'"/api/load/{ident.raw}"'


def dashboard_schema(ident: Identifier) -> str:
    """Event validator and type appended to the type-schema file."""
    return f'''// {_title(ident)} events
export const {ident.camel}EventSchema = z.object({{
  type: z.literal("{ident.screaming_snake}_UPDATED"),
  payload: z.record(z.unknown()),
}});
export type {ident.pascal}Event = z.infer<typeof {ident.camel}EventSchema>;
'''


def dashboard_schema_marker(ident: Identifier) -> str:
    return f"export type {ident.pascal}Event ="


# =============================================================================
# Feed page
# =============================================================================

def render_feed_page(ident: Identifier, schemas_module: str) -> dict[str, str]:
    """Generate a feed page: list + composer backed by /api/<name>/items."""
    p, c, raw = ident.pascal, ident.camel, ident.raw
    title = _title(ident)
    files = {}

    files["index.html"] = _app_index_html(ident)
    files["index.tsx"] = _app_entry(ident)

    files[f"use{p}Feed.ts"] = f'''import {{ createResource, createSignal }} from "solid-js";
import type {{ {p}Item, {p}ItemInput }} from "{schemas_module}";

const ENDPOINT = "/api/{raw}/items";

async function fetchItems(): Promise<{p}Item[]> {{
  const response = await fetch(ENDPOINT, {{ credentials: "include" }});
  if (!response.ok) throw new Error("Failed to load {raw} items");
  const body = await response.json();
  return body.items;
}}

export function use{p}Feed() {{
  const [items, {{ mutate, refetch }}] = createResource(fetchItems);
  const [posting, setPosting] = createSignal(false);

  async function create(input: {p}ItemInput) {{
    setPosting(true);
    try {{
      const response = await fetch(ENDPOINT, {{
        method: "POST",
        credentials: "include",
        headers: {{ "Content-Type": "application/json" }},
        body: JSON.stringify(input),
      }});
      if (!response.ok) throw new Error("Failed to create {raw} item");
      const item: {p}Item = await response.json();
      mutate((prev) => [item, ...(prev ?? [])]);
      return item;
    }} finally {{
      setPosting(false);
    }}
  }}

  return {{ items, create, posting, refetch }};
}}
'''

    files[f"{p}.tsx"] = f'''import {{ For, Show, createSignal }} from "solid-js";
import {{ use{p}Feed }} from "./use{p}Feed";

export default function {p}() {{
  const feed = use{p}Feed();
  const [title, setTitle] = createSignal("");

  const submit = async (e: Event) => {{
    e.preventDefault();
    if (!title().trim()) return;
    await feed.create({{ title: title() }});
    setTitle("");
  }};

  return (
    <main class="mx-auto max-w-2xl p-6 space-y-6">
      <h1 class="text-2xl font-bold">{title}</h1>

      <form class="flex gap-2" onSubmit={{submit}}>
        <input
          class="input flex-1"
          placeholder="Write something..."
          value={{title()}}
          onInput={{(e) => setTitle(e.currentTarget.value)}}
        />
        <button class="btn btn-primary" type="submit" disabled={{feed.posting()}}>
          Post
        </button>
      </form>

      <Show when={{!feed.items.loading}} fallback={{<p class="text-muted-foreground">Loading...</p>}}>
        <ul class="space-y-3">
          <For each={{feed.items()}} fallback={{<li class="text-muted-foreground">Nothing here yet.</li>}}>
            {{(item) => (
              <li class="card p-4">
                <p class="font-medium">{{item.title}}</p>
                <Show when={{item.body}}>
                  <p class="text-sm text-muted-foreground">{{item.body}}</p>
                </Show>
              </li>
            )}}
          </For>
        </ul>
      </Show>
    </main>
  );
}}
'''
    return files


def feed_routes(ident: Identifier) -> str:
    """List/create endpoints registered in the server route file."""
    p, c, raw = ident.pascal, ident.camel, ident.raw
    return f'''// {_title(ident)} feed
app.get("/api/{raw}/items", authMiddleware, async (c) => {{
  const shard = getUserShard(c.env, c.get("userId"));
  const items = await shard.list{p}Items();
  return c.json({{ items }});
}});

app.post("/api/{raw}/items", authMiddleware, async (c) => {{
  const input = {c}ItemInputSchema.parse(await c.req.json());
  const shard = getUserShard(c.env, c.get("userId"));
  const item = await shard.create{p}Item(input);
  return c.json(item, 201);
}});
'''


def feed_routes_marker(ident: Identifier) -> str:
    return f'"/api/{ident.raw}/items"'


def feed_schema(ident: Identifier) -> str:
    p, c = ident.pascal, ident.camel
    return f'''// {_title(ident)} feed items
export const {c}ItemInputSchema = z.object({{
  title: z.string().min(1).max(200),
  body: z.string().max(5000).optional(),
}});
export type {p}ItemInput = z.infer<typeof {c}ItemInputSchema>;

export const {c}ItemSchema = {c}ItemInputSchema.extend({{
  id: z.string(),
  createdAt: z.number(),
  updatedAt: z.number(),
}});
export type {p}Item = z.infer<typeof {c}ItemSchema>;
'''


def feed_schema_marker(ident: Identifier) -> str:
    return f"export type {ident.pascal}Item ="


def feed_table(ident: Identifier) -> str:
    """Per-user table appended to the sharded database schema."""
    return f'''// {_title(ident)} feed items (per-user shard)
export const {ident.camel}Items = sqliteTable("{ident.snake}_items", {{
  id: text("id").primaryKey(),
  title: text("title").notNull(),
  body: text("body"),
  createdAt: integer("created_at").default(sql`(unixepoch())`).notNull(),
  updatedAt: integer("updated_at").default(sql`(unixepoch())`).notNull(),
}});
'''


def feed_table_marker(ident: Identifier) -> str:
    return f"export const {ident.camel}Items ="


def feed_shard_methods(ident: Identifier) -> str:
    """Methods inserted into the user shard class body."""
    p, c = ident.pascal, ident.camel
    return f'''  async list{p}Items(limit = 50) {{
    return this.db
      .select()
      .from({c}Items)
      .orderBy(desc({c}Items.createdAt))
      .limit(limit);
  }}

  async create{p}Item(input: {p}ItemInput) {{
    const now = Math.floor(Date.now() / 1000);
    const item = {{ id: crypto.randomUUID(), ...input, createdAt: now, updatedAt: now }};
    await this.db.insert({c}Items).values(item);
    return item;
  }}
'''


def feed_shard_marker(ident: Identifier) -> str:
    return f"list{ident.pascal}Items("
