"""Tests for catalog normalization and the built-in device list."""

import copy

import pytest
from llm_hardware_calc.catalog import (
    DEFAULT_GPU_LIST,
    GpuDevice,
    MemorySource,
    default_devices,
    normalize_catalog,
    sort_devices,
)
from llm_hardware_calc.utils.errors import CatalogParseError


@pytest.fixture
def raw_catalog():
    """A small catalog exercising every extraction stage."""
    return {
        "1": {"Model": "GeForce RTX 4090", "Vendor": "NVIDIA", "Memory Size (GB)": 24, "Launch": "2022-10-12"},
        "2": {"Model": "NVIDIA GeForce RTX 3080", "Vendor": "NVIDIA", "Memory": "10 GB"},
        "3": {"Model": "Radeon RX 7900 XTX", "Vendor": "AMD"},
        "4": {"Model": "GeForce RTX 4055", "Vendor": "NVIDIA"},
        "5": {"Model": "Mystery Accelerator", "Vendor": "nan"},
        "6": {"Vendor": "NVIDIA", "Memory": "8 GB"},
        "7": "not a record",
        "8": {"Model": "Apple M2 Max", "Vendor": "Apple", "Memory": "32 GB"},
    }


class TestNormalizeCatalog:
    """Tests for normalize_catalog."""

    def test_canonical_order(self, raw_catalog):
        """Devices are sorted by VRAM descending, then name."""
        devices = normalize_catalog(raw_catalog).devices
        assert [(d.name, d.vram_gb) for d in devices] == [
            ("M2 Max", 32.0),
            ("GeForce RTX 4090", 24.0),
            ("Radeon RX 7900 XTX", 24.0),
            ("GeForce RTX 4055", 12.0),
            ("GeForce RTX 3080", 10.0),
            ("Mystery Accelerator", 6.0),
        ]

    def test_memory_sources(self, raw_catalog):
        """Each device records which stage resolved its VRAM."""
        by_name = {d.name: d for d in normalize_catalog(raw_catalog).devices}
        assert by_name["GeForce RTX 4090"].memory_source == MemorySource.DIRECT
        assert by_name["Radeon RX 7900 XTX"].memory_source == MemorySource.INFERRED
        assert by_name["GeForce RTX 4055"].memory_source == MemorySource.FAMILY
        assert by_name["Mystery Accelerator"].memory_source == MemorySource.FLOOR

    def test_stats(self, raw_catalog):
        """Extraction statistics count every outcome."""
        stats = normalize_catalog(raw_catalog).stats
        assert stats.to_dict() == {
            "direct": 3,
            "inferred": 1,
            "family": 1,
            "floor": 1,
            "skipped": 2,
            "total": 6,
        }

    def test_device_fields(self, raw_catalog):
        """IDs, vendors, launch dates and unified flags are derived."""
        by_name = {d.name: d for d in normalize_catalog(raw_catalog).devices}

        rtx = by_name["GeForce RTX 4090"]
        assert rtx.id == "1_GeForce RTX 4090_24"
        assert rtx.vendor == "NVIDIA"
        assert rtx.launch_date == "2022-10-12"
        assert rtx.is_unified_memory is False

        assert by_name["M2 Max"].is_unified_memory is True
        assert by_name["M2 Max"].display_name == "Apple M2 Max"
        assert by_name["Mystery Accelerator"].vendor == ""
        assert by_name["Mystery Accelerator"].launch_date is None

    def test_idempotent(self, raw_catalog):
        """Normalizing twice gives identical output."""
        assert normalize_catalog(raw_catalog) == normalize_catalog(raw_catalog)

    def test_input_order_irrelevant(self, raw_catalog):
        """Key order of the raw catalog does not change the result."""
        reversed_raw = dict(reversed(list(raw_catalog.items())))
        assert normalize_catalog(reversed_raw).devices == normalize_catalog(raw_catalog).devices

    def test_input_not_mutated(self, raw_catalog):
        """The raw catalog is left untouched."""
        before = copy.deepcopy(raw_catalog)
        normalize_catalog(raw_catalog)
        assert raw_catalog == before

    def test_vendor_guessed(self):
        """Missing vendors are guessed from the name."""
        devices = normalize_catalog({"x": {"Model": "GeForce GTX 1080"}}).devices
        assert devices[0].vendor == "NVIDIA"
        assert devices[0].vram_gb == 8.0

    def test_mb_values(self):
        """Mis-scaled MB values are converted."""
        raw = {
            "a": {"Model": "Old Card", "Memory": 4096},
            "b": {"Model": "Tiny Card", "Memory Size": "512 MB"},
        }
        by_name = {d.name: d.vram_gb for d in normalize_catalog(raw).devices}
        assert by_name == {"Old Card": 4.0, "Tiny Card": 0.5}

    def test_rounds_to_one_decimal(self):
        """VRAM is rounded to one decimal place."""
        devices = normalize_catalog({"a": {"Model": "Odd Card", "Memory": "7.68 GB"}}).devices
        assert devices[0].vram_gb == 7.7
        assert devices[0].id == "a_Odd Card_7.7"

    def test_parenthetical_removed(self):
        """Name cleanup drops notes in parentheses."""
        raw = {"a": {"Model": "Radeon RX 6800 (Navi 21)", "Vendor": "AMD", "Memory": "16 GB"}}
        assert normalize_catalog(raw).devices[0].name == "Radeon RX 6800"

    def test_empty_catalog(self):
        """An empty catalog normalizes to nothing."""
        result = normalize_catalog({})
        assert result.devices == ()
        assert result.stats.total == 0

    @pytest.mark.parametrize("raw", [[], "gpus", None, 42])
    def test_non_mapping_rejected(self, raw):
        """The top level must be an object keyed by ID."""
        with pytest.raises(CatalogParseError):
            normalize_catalog(raw)


class TestSortDevices:
    """Tests for sort_devices tie-breaking."""

    def test_ties_broken_by_id(self):
        """Same name and VRAM sort by ID."""
        a = GpuDevice(id="b", name="RTX 4090", vram_gb=24)
        b = GpuDevice(id="a", name="RTX 4090", vram_gb=24)
        assert [d.id for d in sort_devices([a, b])] == ["a", "b"]

    def test_case_insensitive_name(self):
        """Names compare case-insensitively first."""
        a = GpuDevice(id="1", name="radeon", vram_gb=8)
        b = GpuDevice(id="2", name="GeForce", vram_gb=8)
        assert [d.name for d in sort_devices([a, b])] == ["GeForce", "radeon"]


class TestDefaultDevices:
    """Tests for the built-in fallback list."""

    def test_all_entries_built(self):
        """Every static row becomes a device."""
        devices = default_devices()
        assert len(devices) == len(DEFAULT_GPU_LIST)
        assert all(d.memory_source == MemorySource.STATIC for d in devices)

    def test_sorted(self):
        """The static list uses canonical order."""
        devices = default_devices()
        assert devices == sort_devices(devices)
        assert devices[0].vram_gb == max(d.vram_gb for d in devices)

    def test_unique_ids(self):
        """Configurations of the same chip get distinct IDs."""
        ids = [d.id for d in default_devices()]
        assert len(ids) == len(set(ids))

    def test_contains_both_kinds(self):
        """The fallback covers discrete and unified devices."""
        devices = default_devices()
        assert any(d.is_unified_memory for d in devices)
        assert any(not d.is_unified_memory for d in devices)
        assert any(d.name == "RTX 4090" and d.vram_gb == 24 for d in devices)
