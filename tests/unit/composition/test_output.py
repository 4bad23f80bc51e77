"""Tests for rendering and writing compositions."""
from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from tessera.core.bundles import Agent, Command, Hook
from tessera.core.composition import (
    CompositionResult,
    artifact_filename,
    render_agent,
    render_command,
    write_composition,
)
from tessera.core.errors import MergeError
from tessera.core.utils.text import parse_frontmatter


def _result() -> CompositionResult:
    return CompositionResult(
        bundle_ids=("a",),
        document="# Doc\n",
        agents=(Agent(name="Code Reviewer", description="Reviews", content="Review.", source="a", tools=("Read", "Grep")),),
        commands=(Command(name="deploy", description="Ship it", content="Run deploy.", source="a", argument_hint="<env>"),),
        hooks=(
            Hook(name="format.sh", kind="script", content="#!/bin/sh\n", source="a"),
            Hook(name="hooks.json", kind="config", content="{}", source="a"),
        ),
        settings={"permissions": {"allow": ["Read"]}},
    )


class TestRendering:
    def test_artifact_filename(self) -> None:
        assert artifact_filename("Code Reviewer") == "code-reviewer.md"
        assert artifact_filename("api_v2") == "api-v2.md"

    def test_artifact_filename_rejects_unusable_names(self) -> None:
        with pytest.raises(MergeError):
            artifact_filename("???")

    def test_render_agent_header(self) -> None:
        agent = _result().agents[0]

        parsed = parse_frontmatter(render_agent(agent))

        assert parsed.frontmatter == {
            "name": "Code Reviewer",
            "description": "Reviews",
            "tools": ["Read", "Grep"],
        }
        assert parsed.content.strip() == "Review."

    def test_render_command_omits_empty_keys(self) -> None:
        command = _result().commands[0]

        parsed = parse_frontmatter(render_command(command))

        assert parsed.frontmatter == {
            "name": "deploy",
            "description": "Ship it",
            "argument-hint": "<env>",
        }


class TestWriteComposition:
    def test_writes_layout(self, tmp_path: Path) -> None:
        out = tmp_path / "out"

        written = write_composition(_result(), out)

        assert (out / "CLAUDE.md").read_text(encoding="utf-8") == "# Doc\n"
        assert (out / ".claude" / "agents" / "code-reviewer.md").is_file()
        assert (out / ".claude" / "commands" / "deploy.md").is_file()
        assert (out / ".claude" / "hooks" / "hooks.json").read_text(encoding="utf-8") == "{}"
        settings = json.loads((out / ".claude" / "settings.json").read_text(encoding="utf-8"))
        assert settings == {"permissions": {"allow": ["Read"]}}
        assert len(written) == 6

    def test_script_hooks_are_executable(self, tmp_path: Path) -> None:
        write_composition(_result(), tmp_path)

        assert os.access(tmp_path / ".claude" / "hooks" / "format.sh", os.X_OK)

    def test_dry_run_writes_nothing(self, tmp_path: Path) -> None:
        out = tmp_path / "out"

        planned = write_composition(_result(), out, dry_run=True)

        assert out / "CLAUDE.md" in planned
        assert not out.exists()

    def test_colliding_artifact_filenames_rejected(self, tmp_path: Path) -> None:
        result = CompositionResult(
            bundle_ids=("a", "b"),
            document="# Doc\n",
            agents=(
                Agent(name="Code Reviewer", description="", content="One.", source="a"),
                Agent(name="code-reviewer", description="", content="Two.", source="b"),
            ),
        )

        with pytest.raises(MergeError, match="code-reviewer.md"):
            write_composition(result, tmp_path / "out")

        assert not (tmp_path / "out").exists()
