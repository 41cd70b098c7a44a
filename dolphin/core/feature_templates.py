"""
Feature templates: billing and AI assistant add-ons.
"""

PRICING_PROVIDERS = {"stripe", "lemonsqueezy"}
AI_PROVIDERS = {"openai", "anthropic", "ollama"}
DEFAULT_AI_MODEL = "gpt-4-turbo-preview"

_PROVIDER_CLASSES = {
    "stripe": ("Stripe", "stripe", "stripe-signature"),
    "lemonsqueezy": ("LemonSqueezy", "@lemonsqueezy/lemonsqueezy.js", "X-Signature"),
    "openai": ("OpenAI", "openai", None),
    "anthropic": ("Anthropic", "@anthropic-ai/sdk", None),
    "ollama": ("Ollama", "ollama", None),
}


# =============================================================================
# Pricing
# =============================================================================

def billing_tables(provider: str) -> str:
    return f'''// Billing & Subscription tables
export const subscriptions = sqliteTable("subscriptions", {{
  id: text("id").primaryKey(),
  userId: text("user_id").notNull(),
  status: text("status").notNull(), // active, canceled, past_due, etc
  {provider}CustomerId: text("{provider}_customer_id"),
  {provider}SubscriptionId: text("{provider}_subscription_id"),
  {provider}PriceId: text("{provider}_price_id"),
  currentPeriodStart: integer("current_period_start"),
  currentPeriodEnd: integer("current_period_end"),
  cancelAt: integer("cancel_at"),
  canceledAt: integer("canceled_at"),
  createdAt: integer("created_at").default(sql`(unixepoch())`).notNull(),
  updatedAt: integer("updated_at").default(sql`(unixepoch())`).notNull(),
}});

export const invoices = sqliteTable("invoices", {{
  id: text("id").primaryKey(),
  userId: text("user_id").notNull(),
  subscriptionId: text("subscription_id"),
  {provider}InvoiceId: text("{provider}_invoice_id"),
  amountPaid: integer("amount_paid"),
  amountDue: integer("amount_due"),
  currency: text("currency"),
  status: text("status"),
  paidAt: integer("paid_at"),
  createdAt: integer("created_at").default(sql`(unixepoch())`).notNull(),
}});

export const usageRecords = sqliteTable("usage_records", {{
  id: text("id").primaryKey(),
  userId: text("user_id").notNull(),
  subscriptionId: text("subscription_id"),
  metric: text("metric").notNull(), // api_calls, storage_gb, etc
  quantity: integer("quantity").notNull(),
  timestamp: integer("timestamp").default(sql`(unixepoch())`).notNull(),
}});
'''


BILLING_TABLES_MARKER = 'sqliteTable("subscriptions"'


def webhook_router_name(provider: str) -> str:
    return f"{provider}WebhookRouter"


def webhook_handler(provider: str, db_schema_module: str) -> str:
    """Webhook stub: verifies the signature and records subscription changes."""
    cls, package, header = _PROVIDER_CLASSES[provider]
    env = provider.upper()
    router = webhook_router_name(provider)
    return f'''import {{ Hono }} from "hono";
import {{ {cls} }} from "{package}";
import {{ eq }} from "drizzle-orm";
import {{ db }} from "../db";
import {{ subscriptions, invoices }} from "{db_schema_module}";

export const {router} = new Hono();

{router}.post("/api/webhooks/{provider}", async (c) => {{
  const signature = c.req.header("{header}");
  const body = await c.req.text();

  if (!signature) {{
    return c.json({{ error: "Missing signature" }}, 400);
  }}

  try {{
    const event = await verify{cls}Event(body, signature, c.env.{env}_WEBHOOK_SECRET);

    switch (event.type) {{
      case "subscription.updated":
        await db
          .update(subscriptions)
          .set({{ status: event.data.status }})
          .where(eq(subscriptions.id, event.data.id));
        break;
      case "invoice.paid":
        await db.insert(invoices).values(event.data);
        break;
      default:
        console.log("Unhandled {provider} event:", event.type);
    }}

    return c.json({{ received: true }});
  }} catch (error) {{
    console.error("{provider} webhook error:", error);
    return c.json({{ error: "Invalid webhook" }}, 400);
  }}
}});

async function verify{cls}Event(body: string, signature: string, secret: string) {{
  // Replace with the {cls} SDK signature verification for your account
  return JSON.parse(body);
}}
'''


def pricing_abstractions() -> str:
    return '''export type Tier = "free" | "pro" | "enterprise";

export const tiers: Record<Tier, { limits: Record<string, number> }> = {
  free: { limits: { api_calls: 1000 } },
  pro: { limits: { api_calls: 100000 } },
  enterprise: { limits: { api_calls: Number.POSITIVE_INFINITY } },
};

const usage = new Map<string, number>();

export async function check(userId: string, metric: string, tier: Tier = "free") {
  const used = usage.get(`${userId}:${metric}`) ?? 0;
  return used < (tiers[tier].limits[metric] ?? 0);
}

export async function track(userId: string, metric: string, quantity = 1) {
  const key = `${userId}:${metric}`;
  usage.set(key, (usage.get(key) ?? 0) + quantity);
}

export async function changeSubscription(userId: string, tier: Tier) {
  return { userId, tier };
}
'''


def pricing_env(provider: str) -> str:
    env = provider.upper()
    return f'''# {env} Configuration
{env}_SECRET_KEY=
{env}_PUBLISHABLE_KEY=
{env}_WEBHOOK_SECRET=
{env}_PRO_PRICE_ID=
{env}_ENTERPRISE_PRICE_ID=
'''


def pricing_env_marker(provider: str) -> str:
    return f"{provider.upper()}_SECRET_KEY="


# =============================================================================
# AI assistant
# =============================================================================

def ai_tables() -> str:
    return '''// AI Assistant tables (per-user shard)
export const aiConversations = sqliteTable("ai_conversations", {
  id: text("id").primaryKey(),
  title: text("title"),
  systemPrompt: text("system_prompt"),
  model: text("model").notNull(),
  temperature: real("temperature").default(0.7),
  maxTokens: integer("max_tokens").default(2000),
  createdAt: integer("created_at").default(sql`(unixepoch())`).notNull(),
  updatedAt: integer("updated_at").default(sql`(unixepoch())`).notNull(),
});

export const aiMessages = sqliteTable("ai_messages", {
  id: text("id").primaryKey(),
  conversationId: text("conversation_id").notNull().references(() => aiConversations.id),
  role: text("role").notNull(), // user, assistant, system
  content: text("content").notNull(),
  tokenCount: integer("token_count"),
  createdAt: integer("created_at").default(sql`(unixepoch())`).notNull(),
});
'''


AI_TABLES_MARKER = 'sqliteTable("ai_conversations"'
AI_ROUTER_NAME = "aiRouter"


def ai_router(provider: str, model: str, db_schema_module: str) -> str:
    cls, package, _ = _PROVIDER_CLASSES[provider]
    return f'''import {{ Hono }} from "hono";
import {{ {cls} }} from "{package}";
import {{ eq }} from "drizzle-orm";
import {{ db }} from "../db";
import {{ aiConversations, aiMessages }} from "{db_schema_module}";

export const aiRouter = new Hono();

aiRouter.post("/api/ai/conversations", async (c) => {{
  const {{ title, systemPrompt }} = await c.req.json();
  const conversation = {{
    id: crypto.randomUUID(),
    title,
    systemPrompt,
    model: c.env.AI_MODEL ?? "{model}",
  }};
  await db.insert(aiConversations).values(conversation);
  return c.json(conversation, 201);
}});

aiRouter.get("/api/ai/conversations/:id/messages", async (c) => {{
  const messages = await db
    .select()
    .from(aiMessages)
    .where(eq(aiMessages.conversationId, c.req.param("id")));
  return c.json({{ messages }});
}});

aiRouter.post("/api/ai/conversations/:id/messages", async (c) => {{
  const conversationId = c.req.param("id");
  const {{ content }} = await c.req.json();
  await db.insert(aiMessages).values({{
    id: crypto.randomUUID(),
    conversationId,
    role: "user",
    content,
  }});

  const client = new {cls}({{ apiKey: c.env.{provider.upper()}_API_KEY }});
  const reply = await complete(client, c.env.AI_MODEL ?? "{model}", content);

  const message = {{ id: crypto.randomUUID(), conversationId, role: "assistant", content: reply }};
  await db.insert(aiMessages).values(message);
  return c.json(message);
}});

async function complete(client: {cls}, model: string, prompt: string): Promise<string> {{
  // Provider-specific completion call
  return `(${{model}}) ${{prompt}}`;
}}
'''


def ai_client_hook() -> str:
    return '''import { createSignal } from "solid-js";

export interface AIMessage {
  id: string;
  role: "user" | "assistant" | "system";
  content: string;
}

export function useAIConversation(conversationId: string) {
  const [messages, setMessages] = createSignal<AIMessage[]>([]);
  const [sending, setSending] = createSignal(false);

  async function send(content: string) {
    setSending(true);
    setMessages((prev) => [...prev, { id: crypto.randomUUID(), role: "user", content }]);
    try {
      const response = await fetch(`/api/ai/conversations/${conversationId}/messages`, {
        method: "POST",
        credentials: "include",
        headers: { "Content-Type": "application/json" },
        body: JSON.stringify({ content }),
      });
      if (!response.ok) throw new Error("Failed to send message");
      const reply: AIMessage = await response.json();
      setMessages((prev) => [...prev, reply]);
      return reply;
    } finally {
      setSending(false);
    }
  }

  return { messages, send, sending };
}
'''


def ai_env(provider: str, model: str) -> str:
    lines = [
        "# AI Configuration",
        f"{provider.upper()}_API_KEY=",
        f"AI_MODEL={model}",
    ]
    if provider == "ollama":
        lines.append("OLLAMA_HOST=http://localhost:11434")
    return "\n".join(lines) + "\n"


AI_ENV_MARKER = "AI_MODEL="


def mount_route(router: str) -> str:
    """Router mount registered in the server route file."""
    return f'app.route("/", {router});\n'
