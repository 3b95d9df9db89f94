"""Tests for the mindmap-layout command line."""

import json

import pytest

from mindmap_layout import __version__
from mindmap_layout.cli import main
from mindmap_layout.layout.grid import MIN_NODE_HEIGHT, MIN_NODE_WIDTH


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Project directory with no config files in reach."""
    (tmp_path / ".git").mkdir()
    monkeypatch.chdir(tmp_path)
    user_config = tmp_path / "home" / "config.toml"
    monkeypatch.setattr("mindmap_layout.config.USER_CONFIG_PATH", user_config)
    monkeypatch.setattr("mindmap_layout.cli.config_cmd.USER_CONFIG_PATH", user_config)
    return tmp_path


def _write_graph(path, nodes=3, edges=((0, 1), (1, 2))):
    data = {
        "nodes": [{"index": i, "width": 40, "height": 40, "text": f"n{i}"} for i in range(nodes)],
        "edges": [{"source": s, "target": t} for s, t in edges],
    }
    path.write_text(json.dumps(data))
    return path


class TestMain:
    """Tests for top-level argument handling."""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "mindmap-layout" in capsys.readouterr().out

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out


class TestOptimizeCommand:
    """Tests for `mindmap-layout optimize`."""

    def test_writes_locations_to_output(self, workdir, capsys):
        source = _write_graph(workdir / "map.json")
        out = workdir / "out.json"

        code = main(
            ["optimize", str(source), "-o", str(out), "--seed", "1", "--min-edge-length", "10"]
        )

        assert code == 0
        result = json.loads(out.read_text())
        locations = [(n["x"], n["y"]) for n in result["nodes"]]
        assert len(set(locations)) == 3
        assert [n["text"] for n in result["nodes"]] == ["n0", "n1", "n2"]
        assert result["edges"] == [{"source": 0, "target": 1}, {"source": 1, "target": 2}]
        # Input left untouched
        assert all(n.get("x", 0) == 0 for n in json.loads(source.read_text())["nodes"])

        stdout = capsys.readouterr().out
        assert "Layout Summary" in stdout
        assert f"Final cost: {MIN_NODE_WIDTH + MIN_NODE_HEIGHT:.1f}" in stdout

    def test_overwrites_input_by_default(self, workdir):
        source = _write_graph(workdir / "map.json", nodes=2, edges=((0, 1),))
        assert main(["optimize", str(source), "--seed", "0", "-q"]) == 0
        xs = sorted(n["x"] for n in json.loads(source.read_text())["nodes"])
        assert xs == [-110.0, 110.0]

    def test_json_summary(self, workdir, capsys):
        source = _write_graph(workdir / "map.json")
        code = main(["optimize", str(source), "--seed", "2", "--format", "json", "-q"])
        assert code == 0

        summary = json.loads(capsys.readouterr().out)
        assert summary["nodes"] == 3
        assert summary["edges"] == 2
        assert summary["final_cost"] <= summary["initial_cost"]
        assert summary["cancelled"] is False
        assert summary["levels"] == 12

    def test_json_format_streams_progress_on_stderr(self, workdir, capsys):
        source = _write_graph(workdir / "map.json")
        assert main(["optimize", str(source), "--seed", "2", "--format", "json"]) == 0

        captured = capsys.readouterr()
        summary = json.loads(captured.out)
        events = [json.loads(line) for line in captured.err.splitlines()]
        assert len(events) == summary["batches"]
        assert all(e["event"] == "progress" for e in events)
        assert events[-1]["progress"] == 1.0
        assert events[-1]["message"].startswith("Annealing t=")

    def test_quiet_json_has_no_progress_events(self, workdir, capsys):
        source = _write_graph(workdir / "map.json")
        assert main(["optimize", str(source), "--format", "json", "-q"]) == 0
        assert capsys.readouterr().err == ""

    def test_dry_run_leaves_file_alone(self, workdir, capsys):
        source = _write_graph(workdir / "map.json")
        before = source.read_text()

        assert main(["optimize", str(source), "--dry-run", "--format", "json"]) == 0

        assert source.read_text() == before
        report = json.loads(capsys.readouterr().out)
        assert report == {"nodes": 3, "edges": 2, "initial_cost": 475.0}

    def test_dry_run_table(self, workdir, capsys):
        source = _write_graph(workdir / "map.json")
        assert main(["optimize", str(source), "--dry-run", "--min-edge-length", "10"]) == 0
        stdout = capsys.readouterr().out
        assert "[dry-run] Lattice: 2 x 2" in stdout
        assert "Initial cost: 475.0" in stdout

    def test_missing_file(self, workdir, capsys):
        assert main(["optimize", str(workdir / "nope.json")]) == 1
        assert "graph file not found" in capsys.readouterr().err

    def test_invalid_graph(self, workdir, capsys):
        source = workdir / "bad.json"
        data = {"nodes": [{"index": 0}], "edges": [{"source": 0, "target": 3}]}
        source.write_text(json.dumps(data))
        assert main(["optimize", str(source)]) == 1
        err = capsys.readouterr().err
        assert "Error reading graph" in err
        assert "unknown node(s) [3]" in err

    def test_malformed_json(self, workdir, capsys):
        source = workdir / "bad.json"
        source.write_text("{not json")
        assert main(["optimize", str(source)]) == 1
        assert "Error reading graph" in capsys.readouterr().err

    def test_bad_aspect_ratio(self, workdir, capsys):
        source = _write_graph(workdir / "map.json")
        assert main(["optimize", str(source), "--aspect-ratio", "0"]) == 1
        assert "Aspect ratio must be positive" in capsys.readouterr().err

    def test_uses_project_config(self, workdir, capsys):
        (workdir / ".mindmap-layout.toml").write_text(
            '[defaults]\nformat = "json"\n\n[layout]\nmin_edge_length = 10.0\n'
        )
        source = _write_graph(workdir / "map.json")
        assert main(["optimize", str(source), "--dry-run"]) == 0
        assert json.loads(capsys.readouterr().out)["initial_cost"] == 475.0

    def test_invalid_anneal_config(self, workdir, capsys):
        (workdir / ".mindmap-layout.toml").write_text("[anneal]\nstuck_limit = 0\n")
        source = _write_graph(workdir / "map.json")
        assert main(["optimize", str(source)]) == 1
        assert "Invalid annealing schedule" in capsys.readouterr().err

    @pytest.mark.parametrize(
        "text,key",
        [
            ('[anneal]\nstuck_limit = "five"\n', "anneal.stuck_limit"),
            ('[layout]\naspect_ratio = "wide"\n', "layout.aspect_ratio"),
        ],
    )
    def test_mistyped_config_value(self, workdir, capsys, text, key):
        (workdir / ".mindmap-layout.toml").write_text(text)
        source = _write_graph(workdir / "map.json")
        before = source.read_text()

        assert main(["optimize", str(source)]) == 1

        err = capsys.readouterr().err
        assert f"Error: Config key '{key}'" in err
        assert source.read_text() == before

    def test_broken_config_file(self, workdir, capsys):
        (workdir / ".mindmap-layout.toml").write_text("[layout\n")
        source = _write_graph(workdir / "map.json")
        assert main(["optimize", str(source)]) == 1
        assert "Invalid TOML" in capsys.readouterr().err


class TestConfigCommand:
    """Tests for `mindmap-layout config`."""

    def test_show_defaults(self, workdir, capsys):
        assert main(["config"]) == 0
        stdout = capsys.readouterr().out
        assert "[layout]" in stdout
        assert "aspect_ratio = 1.0  # from: default" in stdout
        assert "seed = # not set  # from: default" in stdout

    def test_init_creates_template(self, workdir, capsys):
        assert main(["config", "--init"]) == 0
        assert (workdir / ".mindmap-layout.toml").exists()
        assert main(["config", "--init"]) == 1
        assert "already exists" in capsys.readouterr().err

    def test_init_user(self, workdir):
        assert main(["config", "--init", "--user"]) == 0
        assert (workdir / "home" / "config.toml").exists()

    def test_get_value(self, workdir, capsys):
        (workdir / "mindmap-layout.toml").write_text("[anneal]\nseed = 17\n")
        assert main(["config", "get", "anneal.seed"]) == 0
        assert capsys.readouterr().out.strip() == "17"

    def test_get_unknown_key(self, workdir, capsys):
        assert main(["config", "get", "layout.zoom"]) == 1
        assert "Unknown key 'zoom'" in capsys.readouterr().err

    def test_paths(self, workdir, capsys):
        assert main(["config", "--paths"]) == 0
        stdout = capsys.readouterr().out
        assert "User config:" in stdout
        assert ".mindmap-layout.toml, mindmap-layout.toml" in stdout

    def test_show_rejects_mistyped_value(self, workdir, capsys):
        (workdir / ".mindmap-layout.toml").write_text('[anneal]\nstuck_limit = "five"\n')
        assert main(["config", "--show"]) == 1
        assert "must be an integer" in capsys.readouterr().err
