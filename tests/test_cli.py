"""Tests for the command line interface."""

import json

import httpx
import pytest
from click.testing import CliRunner
from conftest import SAMPLE_CATALOG, CatalogServer, connect_error, ok

from llm_hardware_calc import cli as cli_module
from llm_hardware_calc.catalog import CatalogClient
from llm_hardware_calc.catalog.cache import CACHE_FILENAME
from llm_hardware_calc.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def serve(monkeypatch):
    """Route catalog downloads to a CatalogServer."""

    def _serve(*responses):
        server = CatalogServer(*responses)
        monkeypatch.setattr(
            cli_module,
            "CatalogClient",
            lambda url: CatalogClient(url=url, transport=server.transport, initial_backoff=0),
        )
        return server

    return _serve


def invoke(runner, tmp_path, *args):
    return runner.invoke(cli, ["--cache-dir", str(tmp_path), *args], obj={})


class TestCalculate:
    """Tests for the calculate command."""

    def test_json(self, runner, tmp_path):
        """JSON output carries the memory breakdown."""
        result = invoke(runner, tmp_path, "calculate", "-p", "7", "--json")
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["model_size_gb"] == 13.04
        assert data["kv_cache_gb"] == 2.0
        assert data["vram_min_gb"] == 14.54
        assert data["is_unified_memory"] is False

    def test_quantization(self, runner, tmp_path):
        """Quantization tags are case-insensitive."""
        result = invoke(runner, tmp_path, "calculate", "-p", "7", "-q", "int4", "--json")
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["model_size_gb"] == 3.26

    def test_unified(self, runner, tmp_path):
        """Unified memory output includes the pool limit."""
        result = invoke(runner, tmp_path, "calculate", "-p", "7", "--unified", "--json")
        data = json.loads(result.output)
        assert data["is_unified_memory"] is True
        assert data["unified_memory_max_gb"] == 512

    def test_table(self, runner, tmp_path):
        """Default output is a table."""
        result = invoke(runner, tmp_path, "calculate", "-p", "7")
        assert result.exit_code == 0, result.output
        assert "Memory Requirements" in result.output
        assert "VRAM (min)" in result.output

    @pytest.mark.parametrize(
        "args",
        [
            ["-p", "0"],
            ["-p", "-3"],
            ["-p", "7", "--context", "0"],
            ["-p", "7", "--batch", "0"],
            ["-p", "7", "--num-gpus", "0"],
        ],
    )
    def test_invalid_input(self, runner, tmp_path, args):
        """Invalid configurations are usage errors."""
        result = invoke(runner, tmp_path, "calculate", *args)
        assert result.exit_code == 2


class TestRecommend:
    """Tests for the recommend command."""

    def test_remote_catalog(self, runner, tmp_path, serve):
        """Recommendations come from the downloaded catalog."""
        server = serve(ok(SAMPLE_CATALOG))
        result = invoke(runner, tmp_path, "recommend", "-p", "7", "--json")
        assert result.exit_code == 0, result.output

        data = json.loads(result.output)
        assert data["catalog"]["source"] == "remote"
        assert data["catalog"]["device_count"] == len(SAMPLE_CATALOG)
        recs = data["recommendations"]
        assert recs["optimal"]["name"] == "A100"
        assert recs["performance"]["name"] == "A100"
        assert recs["budget"]["name"] == "GeForce RTX 4090"
        assert server.calls == 1
        assert (tmp_path / CACHE_FILENAME).exists()

    def test_cached_catalog(self, runner, tmp_path, serve):
        """A second run reads the cache file."""
        server = serve(ok(SAMPLE_CATALOG))
        invoke(runner, tmp_path, "recommend", "-p", "7", "--json")
        result = invoke(runner, tmp_path, "recommend", "-p", "7", "--json")
        assert json.loads(result.output)["catalog"]["source"] == "cache"
        assert server.calls == 1

    def test_static_fallback(self, runner, tmp_path, serve):
        """Network failure still produces recommendations."""
        serve(connect_error)
        result = invoke(runner, tmp_path, "recommend", "-p", "7", "--json")
        assert result.exit_code == 0, result.output

        data = json.loads(result.output)
        assert data["catalog"]["source"] == "static"
        assert data["catalog"]["is_fallback"] is True
        assert data["recommendations"]["optimal"] is not None

    def test_fallback_warning(self, runner, tmp_path, serve):
        """Table output flags a degraded catalog."""
        serve(httpx.Response(503))
        result = invoke(runner, tmp_path, "recommend", "-p", "7")
        assert result.exit_code == 0, result.output
        assert "GPU catalog unavailable" in result.output
        assert "GPU Recommendations" in result.output

    def test_nothing_fits(self, runner, tmp_path, serve):
        """Oversized models report no recommendation."""
        serve(ok(SAMPLE_CATALOG))
        result = invoke(runner, tmp_path, "recommend", "-p", "2000", "--max-gpus", "2")
        assert result.exit_code == 0, result.output
        assert "No compatible GPU configuration" in result.output


class TestGpus:
    """Tests for the gpus command."""

    def test_search(self, runner, tmp_path, serve):
        """Search narrows the listing."""
        serve(ok(SAMPLE_CATALOG))
        result = invoke(runner, tmp_path, "gpus", "--search", "24gb", "--json")
        assert result.exit_code == 0, result.output

        data = json.loads(result.output)
        assert data["total"] == 2
        assert {d["vram_gb"] for d in data["devices"]} == {24.0}

    def test_category(self, runner, tmp_path, serve):
        """Category filters apply before the search."""
        serve(ok(SAMPLE_CATALOG))
        result = invoke(runner, tmp_path, "gpus", "--category", "unified", "--json")
        data = json.loads(result.output)
        assert [d["name"] for d in data["devices"]] == ["M2 Ultra"]

    def test_limit(self, runner, tmp_path, serve):
        """Limit truncates rows but not the total."""
        serve(ok(SAMPLE_CATALOG))
        result = invoke(runner, tmp_path, "gpus", "--limit", "2", "--json")
        data = json.loads(result.output)
        assert data["total"] == len(SAMPLE_CATALOG)
        assert len(data["devices"]) == 2

    def test_no_match(self, runner, tmp_path, serve):
        """Unmatched searches print a notice."""
        serve(ok(SAMPLE_CATALOG))
        result = invoke(runner, tmp_path, "gpus", "--search", "voodoo")
        assert result.exit_code == 0, result.output
        assert "No GPUs found" in result.output


class TestQuantizations:
    """Tests for the quantizations command."""

    def test_json(self, runner, tmp_path):
        """Every supported format is listed."""
        result = invoke(runner, tmp_path, "quantizations", "--json")
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert len(data) == 21
        assert data[0]["tag"] == "FP32"
        assert {"tag": "INT4", "bytes_per_parameter": 0.5}.items() <= data[8].items()


class TestClearCache:
    """Tests for the clear-cache command."""

    def test_removes_cache_file(self, runner, tmp_path, serve):
        """clear-cache deletes the cache file."""
        serve(ok(SAMPLE_CATALOG))
        invoke(runner, tmp_path, "gpus", "--json")
        assert (tmp_path / CACHE_FILENAME).exists()

        result = invoke(runner, tmp_path, "clear-cache")
        assert result.exit_code == 0, result.output
        assert "Catalog cache cleared" in result.output
        assert not (tmp_path / CACHE_FILENAME).exists()

    def test_missing_cache(self, runner, tmp_path):
        """Clearing an absent cache is not an error."""
        result = invoke(runner, tmp_path, "clear-cache")
        assert result.exit_code == 0, result.output
