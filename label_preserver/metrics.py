"""Prometheus metrics."""

from prometheus_client import Counter, Gauge, Histogram

reconciliations = Counter(
    'node_label_preserver_reconciliations_total',
    'Total number of reconciliations by event kind',
    ['event']
)
reconciliation_errors = Counter(
    'node_label_preserver_reconciliation_errors_total',
    'Total number of reconciliation errors by error kind',
    ['kind']
)
reconciliation_duration = Histogram(
    'node_label_preserver_reconciliation_duration_seconds',
    'Time spent reconciling a single node'
)
labels_restored = Counter(
    'node_label_preserver_labels_restored_total',
    'Total number of labels restored to nodes'
)
backups_written = Counter(
    'node_label_preserver_backups_written_total',
    'Total number of backup records written'
)
safety_valve_triggered = Counter(
    'node_label_preserver_cleanup_safety_valve_total',
    'Cleanups released without a backup because deletion was pending too long'
)
nodes_monitored = Gauge(
    'node_label_preserver_nodes_monitored',
    'Number of nodes currently being monitored'
)