# kubestatemetrics

Building blocks for exposing the state of Kubernetes objects as metrics in the
Prometheus text exposition format. The package has no third-party
dependencies.

Objects are turned into metric families by generator functions. The rendered
families are kept in a store keyed by object UID. The whole store is then
written out as one exposition document, with a `# HELP` and a `# TYPE` line
above each family.

## Modules

- `kubestatemetrics.metric`
  - `Metric`, `Family` and `FamilyGenerator`.
  - The `MetricType` enum (`GAUGE`, `COUNTER`) and the `ResourceUnit` enum
    (`BYTE`, `CORE`, `INTEGER`).
  - `format_float` and `escape_label_value`.
  - Helpers that work on lists of generators:
    - `extract_metric_family_headers` returns the HELP/TYPE header of each
      generator.
    - `compose_metric_gen_funcs` folds the generators into one function that
      returns every family for an object.
    - `filter_metric_families` keeps the generators whose name a lister
      includes.
- `kubestatemetrics.metrics_store`
  - `MetricsStore(headers, generate_func)` stores the rendered bytes of each
    object's families under the object's UID. It does not keep the object
    itself.
  - It has `add`, `update`, `delete` and `replace`.
  - `get` and `get_by_key` return `(families, found)`.
  - `list` and `list_keys` always return empty lists.
  - `resync` checks that every entry has one family per header and raises
    `ValueError` otherwise.
  - `write_all(stream)` writes every header, each followed by that family's
    metrics for all objects, to a binary stream.
  - `object_uid(obj)` reads `metadata.uid` from a mapping or from an object
    with attributes. It raises `TypeError` when there is no metadata.
- `kubestatemetrics.whiteblacklist`
  - `WhiteBlackList(whitelist, blacklist)` holds either a whitelist or a
    blacklist of regular expressions. Giving both raises `ValueError`; giving
    neither gives an empty blacklist.
  - `include` and `exclude` change the list.
  - `parse` compiles the items and raises `re.error` for an invalid pattern.
  - `is_included` and `is_excluded` answer for a name.
  - `status` describes the list in one line.
- `kubestatemetrics.sharding`
  - `fnv1a_64` and `jump_hash`.
  - `Sharding(shard, total_shards).keep(obj)` says whether an object, by its
    UID, belongs to that shard.
  - `ShardedListWatch` wraps anything with `list(options)` and
    `watch(options)` methods and passes on only this shard's objects. Watch
    events whose object has no metadata are passed on unfiltered.
  - `new_sharded_list_watch` returns the wrapped source unchanged for shard 0
    of 1.
- `kubestatemetrics.watch`
  - `CounterVec` holds labelled counters, with `inc` and `value`.
  - `Registry` rejects a duplicate name with `ValueError`.
  - `new_list_watch_metrics(registry)` creates the
    `kube_state_metrics_list_total` and `kube_state_metrics_watch_total`
    counters.
  - `InstrumentedListerWatcher` counts successful and failed `list` and
    `watch` calls per resource.
- `kubestatemetrics.options`
  - `Options`, with `parse(argv)` (the process arguments when `argv` is
    `None`) and `usage()`.
  - Bad arguments raise `OptionsError`.
  - The comma-separated collection types `MetricSet`, `CollectorSet` and
    `NamespaceList`, each with `update_from_csv`.
  - The defaults `DEFAULT_COLLECTORS` and `DEFAULT_NAMESPACES`.
- `kubestatemetrics.metrics_handler`
  - `MetricsHandler(store_builder, opts, enable_gzip_encoding,
    stateful_set_name)`.
    - `configure_sharding(shard, total_shards)` rebuilds the stores through
      `store_builder(shard, total_shards, stop_event)` and sets the previous
      stop event.
    - `on_stateful_set_event(name, replicas)` reconfigures sharding when the
      shard settings derived from `opts.pod` change.
    - `render(accept_encoding)` returns `(headers, body)`. The content type is
      `text/plain; version=0.0.4`, and the body is gzipped when that is
      enabled and the client asks for it.
    - The handler is also a WSGI application.
  - `detect_nominal_from_pod`, `sharding_settings_from_stateful_set` and
    `accepts_gzip`.
- `kubestatemetrics.version`
  - `Version` and `get_version()`.
- `kubestatemetrics.reaper`
  - `start_reaper()` installs a SIGCHLD handler that reaps exited children.
    It does this only when the process is PID 1 on Linux, and returns whether
    it did.
  - `reap_children()` reaps without blocking and returns the reaped pids.

## Example

```python
import io

from kubestatemetrics.metric import (
    Family, FamilyGenerator, Metric, MetricType,
    compose_metric_gen_funcs, extract_metric_family_headers,
)
from kubestatemetrics.metrics_store import MetricsStore

gens = [
    FamilyGenerator(
        name="kube_service_info",
        help="Information about service.",
        type=MetricType.GAUGE,
        generate_func=lambda obj: Family(metrics=[
            Metric(["name"], [obj["metadata"]["name"]], 1),
        ]),
    )
]
store = MetricsStore(extract_metric_family_headers(gens), compose_metric_gen_funcs(gens))
store.add({"metadata": {"uid": "a", "name": "my-service"}})

out = io.BytesIO()
store.write_all(out)
print(out.getvalue().decode())
# # HELP kube_service_info Information about service.
# # TYPE kube_service_info gauge
# kube_service_info{name="my-service"} 1
```

## Formatting values

```python
from kubestatemetrics.metric import escape_label_value, format_float

format_float(1)             # "1"
format_float(35.7)          # "35.7"
format_float(float("inf"))  # "+Inf"
escape_label_value('say "hi"\n')  # 'say \\"hi\\"\\n'
```

## Sharding

With two shards, every object is kept by exactly one of them:

```python
from kubestatemetrics.sharding import fnv1a_64, jump_hash

jump_hash(fnv1a_64(b"test_uid"), 2)  # 0
```

A pod named `<statefulset>-<n>` is shard `n`:

```python
from kubestatemetrics.metrics_handler import accepts_gzip, detect_nominal_from_pod

detect_nominal_from_pod("kube-state-metrics", "kube-state-metrics-2")  # 2
accepts_gzip("deflate, gzip;q=1.0")                                    # True
```

A pod name without a numeric suffix raises `ValueError`.

## What this package does not do

- It has no command to run.
- It does not talk to a Kubernetes API server, so it neither lists nor watches
  objects itself.
- It ships no metric generators for particular resource kinds.
- It starts no HTTP server. `MetricsHandler` can be mounted in any WSGI
  server. The objects, the list/watch sources and the store builder are
  supplied by the caller.