"""
Error and warning taxonomy for page generation.

Errors are raised before any file is touched.
Warnings are never raised: the patcher records them on the PatchResult
and logs them, then generation continues.
"""


class GenerationError(Exception):
    """Base error for a generation run that must stop."""
    pass


class ValidationError(GenerationError):
    """Identifier failed a naming rule."""
    pass


class CollisionError(GenerationError):
    """Target page directory already exists."""
    pass


class PatchWarning(UserWarning):
    """Non-fatal condition met while wiring generated code in."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        return self.message


class MissingCollaboratorWarning(PatchWarning):
    """A collaborator file the patcher expects does not exist."""
    pass


class PatchAnchorNotFoundWarning(PatchWarning):
    """The anchor pattern could not be located in a collaborator file."""
    pass
