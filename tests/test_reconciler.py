from sphinx_exporter.orchestrator.reconciler import Reconciler


def _seed(metrics, *names):
    for n in names:
        for key in metrics.all_keys():
            metrics.set_value(key, n, 7)


def test_vanished_index_is_zeroed_for_every_key(metrics):
    _seed(metrics, 'products', 'reviews')
    rec = Reconciler(metrics)
    rec.reconcile({'products', 'reviews'})
    zeroed = rec.reconcile({'products'})
    assert zeroed == {'reviews'}
    for key in metrics.all_keys():
        assert metrics.get_value(key, 'reviews') == 0
        assert metrics.get_value(key, 'products') == 7
    assert rec.previous == frozenset({'products'})


def test_reconcile_is_idempotent(metrics):
    _seed(metrics, 'a', 'b')
    rec = Reconciler(metrics)
    rec.reconcile({'a', 'b'})
    assert rec.reconcile({'a'}) == {'b'}
    metrics.set_value('indexed_documents', 'b', 3)  # would be clobbered by a second zeroing
    assert rec.reconcile({'a'}) == set()
    assert metrics.get_value('indexed_documents', 'b') == 3


def test_first_cycle_zeroes_nothing(metrics):
    rec = Reconciler(metrics)
    assert rec.reconcile({'a'}) == set()
    assert metrics.get_value('indexed_documents', 'a') is None


def test_listed_but_unreached_index_is_kept(metrics):
    _seed(metrics, 'a', 'b', 'c')
    rec = Reconciler(metrics)
    rec.reconcile({'a', 'b', 'c'})
    # partial cycle: listing saw a and b, only a was fetched before abort
    zeroed = rec.reconcile({'a'}, enumerated={'a', 'b'})
    assert zeroed == {'c'}
    assert metrics.get_value('ram_bytes', 'b') == 7
    assert rec.previous == frozenset({'a', 'b'})
    # b later disappears for good and is still detected
    assert rec.reconcile({'a'}, enumerated={'a'}) == {'b'}


def test_outage_retains_state_by_default(metrics):
    _seed(metrics, 'a')
    rec = Reconciler(metrics)
    rec.reconcile({'a'})
    assert rec.reconcile_outage() == set()
    assert rec.previous == frozenset({'a'})
    assert metrics.get_value('indexed_documents', 'a') == 7


def test_outage_zeroes_everything_when_enabled(metrics):
    _seed(metrics, 'a', 'b')
    rec = Reconciler(metrics, zero_on_outage=True)
    rec.reconcile({'a', 'b'})
    assert rec.reconcile_outage() == {'a', 'b'}
    assert metrics.get_value('disk_bytes', 'a') == 0
    assert rec.previous == frozenset()


def test_zeroed_indexes_are_counted(metrics):
    rec = Reconciler(metrics)
    rec.reconcile({'a', 'b'})
    rec.reconcile(set())
    assert metrics.collector_registry.get_sample_value('sphinx_exporter_stale_indexes_zeroed_total') == 2
