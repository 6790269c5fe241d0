import pytest
from prometheus_client import generate_latest

from sphinx_exporter.metrics.definitions import DEFAULT_DEFINITIONS
from sphinx_exporter.metrics.registry import IndexMetricsRegistry
from sphinx_exporter.utils.exceptions import DuplicateMetricError


def test_default_registry_exposes_fixed_key_set(metrics):
    assert metrics.all_keys() == {
        'indexed_documents', 'indexed_bytes', 'field_tokens_title', 'field_tokens_body',
        'total_tokens', 'ram_bytes', 'disk_bytes', 'mem_limit',
    }
    assert len(DEFAULT_DEFINITIONS) == 8


def test_duplicate_registration_fails_fast():
    reg = IndexMetricsRegistry()
    reg.register('indexed_documents', 'sphinx_indexed_documents', 'docs')
    with pytest.raises(DuplicateMetricError):
        reg.register('indexed_documents', 'sphinx_indexed_documents_again', 'docs')


def test_absent_value_is_distinct_from_zero(metrics):
    assert metrics.get_value('indexed_documents', 'products') is None
    metrics.zero('indexed_documents', 'products')
    assert metrics.get_value('indexed_documents', 'products') == 0.0


def test_set_value_overwrites(metrics):
    metrics.set_value('ram_bytes', 'products', 10)
    metrics.set_value('ram_bytes', 'products', 42.5)
    assert metrics.get_value('ram_bytes', 'products') == 42.5
    assert metrics.get_value('ram_bytes', 'reviews') is None


def test_exposition_uses_display_names_and_index_label(metrics):
    metrics.set_value('indexed_documents', 'products', 100)
    metrics.set_index_count(1)
    text = generate_latest(metrics.collector_registry).decode()
    assert 'sphinx_indexed_documents{index="products"} 100.0' in text
    assert 'sphinx_index_count 1.0' in text
    assert 'sphinx_exporter_build_info{version=' in text


def test_registries_are_isolated():
    a = IndexMetricsRegistry()
    b = IndexMetricsRegistry()
    a.register('mem_limit', 'sphinx_mem_limit', 'Memory limit')
    b.register('mem_limit', 'sphinx_mem_limit', 'Memory limit')
    a.set_value('mem_limit', 'x', 1)
    assert b.get_value('mem_limit', 'x') is None


def test_record_cycle_counts_errors_by_kind(metrics):
    metrics.record_cycle(0.5)
    metrics.record_cycle(0.1, 'connection')
    assert metrics.error_count('connection') == 1
    assert metrics.error_count('parse') == 0
    reg = metrics.collector_registry
    assert reg.get_sample_value('sphinx_exporter_cycles_total') == 2
    assert reg.get_sample_value('sphinx_exporter_cycle_duration_seconds') == 0.1
    assert reg.get_sample_value('sphinx_exporter_last_success_timestamp_seconds') > 0
