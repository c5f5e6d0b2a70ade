"""Output hooks for customizing generated files.

Post-generation hooks receive every generated file before it's returned
or written, e.g. to prepend a header or run a formatter.

Example usage:
    from gql_typegen.core.hooks import PostGenerateHook

    class AddLicenseHeader(PostGenerateHook):
        def post_generate(self, filename, content):
            header = "// Copyright 2024 My Company\\n\\n"
            return header + content
"""

import subprocess
from typing import Protocol, runtime_checkable


@runtime_checkable
class PostGenerateHook(Protocol):
    """Protocol for post-generation hooks.

    Post-generation hooks receive the generated code for each file
    and can transform it before it's written to disk.
    """

    def post_generate(self, filename: str, content: str) -> str:
        """Called after code generation for each file.

        Args:
            filename: The name of the generated file (e.g., "types.ts")
            content: The generated code content

        Returns:
            The (possibly transformed) code to write
        """
        ...


class AddHeaderHook:
    """Built-in hook to add a header to generated files.

    Example:
        hook = AddHeaderHook("// Auto-generated - do not edit")
    """

    def __init__(self, header: str):
        self.header = header

    def post_generate(self, _filename: str, content: str) -> str:
        """Add a header to the beginning of the file."""
        if not self.header.endswith("\n"):
            header = self.header + "\n\n"
        else:
            header = self.header + "\n"
        return header + content


class ExternalFormatterHook:
    """Built-in hook piping generated files through a formatter command.

    The command reads the code from stdin and writes the formatted code to
    stdout. ``{filename}`` in the arguments is replaced by the file name.

    Example:
        hook = ExternalFormatterHook(["prettier", "--stdin-filepath", "{filename}"])
    """

    def __init__(self, command: list[str], timeout: float = 30.0):
        self.command = command
        self.timeout = timeout

    def post_generate(self, filename: str, content: str) -> str:
        """Format the content with the external command."""
        args = [arg.replace("{filename}", filename) for arg in self.command]
        result = subprocess.run(
            args,
            input=content,
            capture_output=True,
            text=True,
            timeout=self.timeout,
            check=True,
        )
        return result.stdout


class HookRunner:
    """Runs a collection of hooks in order."""

    def __init__(self, hooks: list[PostGenerateHook] | None = None):
        self.post_hooks: list[PostGenerateHook] = list(hooks or [])

    def add_post_hook(self, hook: PostGenerateHook):
        """Add a post-generation hook."""
        self.post_hooks.append(hook)

    def run_post_hooks(self, filename: str, content: str) -> str:
        """Run all post-generation hooks in order."""
        for hook in self.post_hooks:
            content = hook.post_generate(filename, content)
        return content
