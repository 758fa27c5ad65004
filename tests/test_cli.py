"""Tests for the command line entry point."""

import json
from pathlib import Path

import pytest

from cli import main, parse_args


SMALL_TREE = {
    "src/app.ts": "import { api } from '../lib/api';\nimport { h } from '@/helpers';\n",
    "src/helpers.ts": "",
    "lib/api.ts": "import axios from 'axios';\n",
}


class TestParseArgs:
    """Tests for argument parsing."""

    def test_defaults(self):
        parsed = parse_args([])

        assert parsed.root == "."
        assert parsed.ext is None
        assert parsed.threshold == 50
        assert parsed.jobs == 1
        assert parsed.format == "text"
        assert parsed.page is None

    def test_repeatable_flags(self):
        parsed = parse_args(["src", "--ext", ".ts", "--ext", ".tsx", "--alias", "@/=src"])

        assert parsed.root == "src"
        assert parsed.ext == [".ts", ".tsx"]
        assert parsed.alias == ["@/=src"]

    def test_page_rejected_with_json(self, capsys):
        """Test that a walkthrough page cannot be requested as JSON."""
        with pytest.raises(SystemExit) as excinfo:
            parse_args(["--ext", ".ts", "-f", "json", "--page", "2"])

        assert excinfo.value.code == 2
        assert "--page cannot be combined with --format json" in capsys.readouterr().err


class TestMain:
    """Tests for running the CLI end to end."""

    def test_guidance_without_extensions(self, make_tree, capsys):
        """Test that a run without extensions lists what exists and scans nothing."""
        root = make_tree({"a.ts": "", "b.ts": "", "c.js": ""})

        assert main([str(root)]) == 0

        out = capsys.readouterr().out
        assert "Extensions found: .ts (2, TypeScript)" in out
        assert "Use --ext .ts to scan TS files," in out
        assert "Dependency Map" not in out

    def test_guidance_in_empty_directory(self, tmp_path, capsys):
        assert main([str(tmp_path)]) == 0

        out = capsys.readouterr().out
        assert f"No files found in {tmp_path.resolve()}" in out
        assert "Use --ext .js" in out

    def test_full_report(self, make_tree, capsys):
        root = make_tree(SMALL_TREE)

        assert main([str(root), "--ext", ".ts"]) == 0

        out = capsys.readouterr().out
        assert out.startswith("archtest interview: Codebase Analysis")
        assert "→ lib/api.ts" in out
        assert "→ @/helpers" in out
        assert "axios (used in 1 directory)" in out

    def test_alias_flag(self, make_tree, capsys):
        """Test that an alias turns a package-looking import into a file."""
        root = make_tree(SMALL_TREE)

        assert main([str(root), "--ext", ".ts", "--alias", "@/=src"]) == 0

        out = capsys.readouterr().out
        assert "→ src/helpers.ts" in out
        assert "@/helpers" not in out

    def test_config_file_extensions(self, make_tree, capsys):
        """Test that extensions and aliases are read from .archtest.yml."""
        root = make_tree({
            **SMALL_TREE,
            ".archtest.yml": "scan:\n  extensions: [ts]\n  aliases:\n    \"@/\": src\n",
        })

        assert main([str(root)]) == 0

        out = capsys.readouterr().out
        assert "→ src/helpers.ts" in out

    def test_no_aliases_flag_overrides_config(self, make_tree, capsys):
        root = make_tree({
            **SMALL_TREE,
            ".archtest.yml": "scan:\n  aliases:\n    \"@/\": src\n",
        })

        assert main([str(root), "--ext", "ts", "--no-aliases"]) == 0

        assert "→ @/helpers" in capsys.readouterr().out

    def test_page(self, make_tree, capsys):
        root = make_tree(SMALL_TREE)

        assert main([str(root), "--ext", ".ts", "--page", "3"]) == 0

        out = capsys.readouterr().out
        assert out.startswith("Page 3/3: src/")
        assert "../lib/api → lib/api.ts  [leaves src/]" in out

    def test_page_out_of_range(self, make_tree, capsys):
        root = make_tree(SMALL_TREE)

        assert main([str(root), "--ext", ".ts", "--page", "9"]) == 0

        assert "Page 9 is out of range" in capsys.readouterr().out

    def test_json_format(self, make_tree, capsys):
        root = make_tree(SMALL_TREE)

        assert main([str(root), "--ext", ".ts", "-f", "json"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["files"]["src/app.ts"]["resolved"] == ["lib/api.ts"]

    def test_output_file(self, make_tree, capsys):
        root = make_tree(SMALL_TREE)
        output = root / "report.txt"

        assert main([str(root), "--ext", ".ts", "-o", str(output)]) == 0

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Output written to" in captured.err
        assert output.read_text(encoding="utf-8").startswith("archtest interview")

    def test_invalid_pattern_fails(self, make_tree, capsys):
        """Test that a bad regex is reported as a config error."""
        root = make_tree(SMALL_TREE)

        assert main([str(root), "--ext", ".ts", "--import-pattern", "("]) == 1

        assert "Error: Invalid import pattern" in capsys.readouterr().err

    def test_pattern_without_group_fails(self, make_tree, capsys):
        root = make_tree(SMALL_TREE)

        assert main([str(root), "--ext", ".ts", "--import-pattern", "import"]) == 1

        assert "capturing group" in capsys.readouterr().err

    def test_root_must_be_directory(self, make_tree, capsys):
        root = make_tree({"file.ts": ""})

        assert main([str(root / "file.ts")]) == 1

        assert "is not a directory" in capsys.readouterr().err

    def test_vendored_directory_excluded(self, make_tree, capsys):
        """Test auto-exclusion of a large directory and the --full override."""
        files = {f"vendor/lib{i}.js": "" for i in range(60)}
        files.update({f"src/mod{i}.js": "" for i in range(10)})
        root = make_tree(files)

        assert main([str(root), "--ext", ".js"]) == 0
        out = capsys.readouterr().out
        assert "Excluded: vendor/ (60 files, likely vendored or generated)" in out
        assert "--full" in out
        assert "  10 source files total" in out

        assert main([str(root), "--ext", ".js", "--full"]) == 0
        out = capsys.readouterr().out
        assert "Excluded:" not in out
        assert "  70 source files total" in out

    def test_threshold_flag(self, make_tree, capsys):
        files = {f"gen/g{i}.js": "" for i in range(5)}
        files["src/a.js"] = ""
        root = make_tree(files)

        assert main([str(root), "--ext", ".js", "--threshold", "5"]) == 0

        assert "Excluded: gen/ (5 files" in capsys.readouterr().out

    def test_parallel_matches_sequential(self, make_tree, capsys):
        root = make_tree(SMALL_TREE)

        main([str(root), "--ext", ".ts", "-f", "json"])
        sequential = capsys.readouterr().out
        main([str(root), "--ext", ".ts", "-f", "json", "--jobs", "4"])

        assert capsys.readouterr().out == sequential

    def test_unreadable_file(self, make_tree, capsys, monkeypatch):
        """Test that a read failure is an error unless --best-effort is set."""
        root = make_tree(SMALL_TREE)
        original = Path.read_text

        def _read_text(self, *args, **kwargs):
            if self.name == "helpers.ts":
                raise PermissionError(13, "Permission denied", str(self))
            return original(self, *args, **kwargs)

        monkeypatch.setattr(Path, "read_text", _read_text)

        assert main([str(root), "--ext", ".ts"]) == 1
        assert "Error: Cannot read" in capsys.readouterr().err

        assert main([str(root), "--ext", ".ts", "--best-effort"]) == 0
        assert "→ lib/api.ts" in capsys.readouterr().out

    def test_absolute_alias_target(self, make_tree, capsys):
        """Test that an absolute alias target inside the root resolves to tree files."""
        root = make_tree(SMALL_TREE)

        assert main([str(root), "--ext", ".ts", "--alias", f"@/={root / 'src'}"]) == 0

        assert "→ src/helpers.ts" in capsys.readouterr().out

    def test_json_suspicious_and_excluded(self, make_tree, capsys):
        """Test that JSON reports excluded directories, or suspicious ones with --full."""
        files = {f"vendor/lib{i}.js": "" for i in range(60)}
        files["src/app.js"] = ""
        root = make_tree(files)

        assert main([str(root), "--ext", ".js", "-f", "json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["excluded"] == [{"directory": "vendor", "count": 60}]
        assert data["suspicious"] == []

        assert main([str(root), "--ext", ".js", "-f", "json", "--full"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["excluded"] == []
        assert data["suspicious"] == [{"directory": "vendor", "count": 60}]
