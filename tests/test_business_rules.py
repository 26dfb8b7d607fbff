"""
Tests for business rules configuration
"""

import runpy

from business_rules import (
    CONFIDENCE_Z_BANDS,
    DEFAULT_SETTINGS,
    SERVICE_LEVEL_Z_BANDS,
    export_business_rules_documentation,
    get_default_settings
)
from demand_forecasting import ForecastMethod


class TestRuleTables:

    def test_z_bands_descending(self):
        for bands in (CONFIDENCE_Z_BANDS, SERVICE_LEVEL_Z_BANDS):
            thresholds = [threshold for threshold, _ in bands]
            assert thresholds == sorted(thresholds, reverse=True)

    def test_default_method_is_known(self):
        assert ForecastMethod.from_label(DEFAULT_SETTINGS['method']) is ForecastMethod.HOLT_WINTERS


class TestDefaultSettings:

    def test_returns_independent_copy(self):
        settings = get_default_settings()
        settings['skus'].append('SKU-X')
        settings['horizon'] = 1

        assert DEFAULT_SETTINGS['skus'] == []
        assert get_default_settings()['horizon'] == 12


class TestDocumentationExport:

    def test_writes_markdown(self, tmp_path):
        output = tmp_path / "rules.md"
        path = export_business_rules_documentation(str(output))

        content = output.read_text(encoding="utf-8")
        assert path == str(output)
        assert content.startswith("# Demand Planning Business Rules")
        assert ">= 99%: 2.576" in content
        assert "otherwise: 0.5" in content
        assert "A: cumulative share <= 80%" in content

    def test_module_entry_point_writes_default_file(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        runpy.run_module('business_rules', run_name='__main__')

        assert (tmp_path / "BUSINESS_RULES_DOCUMENTATION.md").exists()
        assert "exported to BUSINESS_RULES_DOCUMENTATION.md" in capsys.readouterr().out
