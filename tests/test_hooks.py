"""Tests for output hooks."""

import subprocess
import sys

import pytest

from gql_typegen.core.hooks import (
    AddHeaderHook,
    ExternalFormatterHook,
    HookRunner,
    PostGenerateHook,
)


class TestAddHeaderHook:
    """Tests for AddHeaderHook."""

    def test_adds_header(self):
        hook = AddHeaderHook("// Auto-generated")
        result = hook.post_generate("types.ts", "export type A = string;")
        assert result.startswith("// Auto-generated\n\n")

    def test_preserves_content(self):
        hook = AddHeaderHook("// Header")
        content = "export type A = string;"
        result = hook.post_generate("types.ts", content)
        assert content in result

    def test_handles_header_with_newline(self):
        hook = AddHeaderHook("// Header\n")
        result = hook.post_generate("types.ts", "code")
        # Should not double-up newlines
        assert result == "// Header\n\ncode"


class TestExternalFormatterHook:
    """Tests for ExternalFormatterHook."""

    def test_pipes_content_through_command(self):
        hook = ExternalFormatterHook([sys.executable, "-c", "import sys; print(sys.stdin.read().upper(), end='')"])
        assert hook.post_generate("types.ts", "export type a = b;") == "EXPORT TYPE A = B;"

    def test_filename_is_substituted(self):
        hook = ExternalFormatterHook([sys.executable, "-c", "import sys; print(sys.argv[1], end='')", "{filename}"])
        assert hook.post_generate("types.ts", "") == "types.ts"

    def test_failing_command(self):
        hook = ExternalFormatterHook([sys.executable, "-c", "raise SystemExit(1)"])
        with pytest.raises(subprocess.CalledProcessError):
            hook.post_generate("types.ts", "code")


class TestHookRunner:
    """Tests for HookRunner."""

    def test_run_post_hooks(self):
        runner = HookRunner()
        runner.add_post_hook(AddHeaderHook("// Header"))

        result = runner.run_post_hooks("types.ts", "code")
        assert result.startswith("// Header")

    def test_hooks_from_constructor(self):
        runner = HookRunner([AddHeaderHook("// Header")])
        assert runner.run_post_hooks("types.ts", "code") == "// Header\n\ncode"

    def test_multiple_post_hooks(self):
        runner = HookRunner()
        runner.add_post_hook(AddHeaderHook("// Line 1"))
        runner.add_post_hook(AddHeaderHook("// Line 0"))

        result = runner.run_post_hooks("types.ts", "code")
        # Both headers should be present (second wraps first)
        assert result == "// Line 0\n\n// Line 1\n\ncode"

    def test_no_hooks(self):
        assert HookRunner().run_post_hooks("types.ts", "code") == "code"


class TestProtocolCompliance:
    """Tests for protocol compliance."""

    def test_add_header_is_post_hook(self):
        assert isinstance(AddHeaderHook("header"), PostGenerateHook)

    def test_formatter_is_post_hook(self):
        assert isinstance(ExternalFormatterHook(["prettier"]), PostGenerateHook)

    def test_custom_post_hook(self):
        class CustomPostHook:
            def post_generate(self, filename, content):
                return content

        assert isinstance(CustomPostHook(), PostGenerateHook)
