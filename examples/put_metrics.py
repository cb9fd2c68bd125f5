"""Example: build and submit request latency metrics.

Run with:
    python examples/put_metrics.py            # dry run, prints datums
    python examples/put_metrics.py --submit   # sends to CloudWatch

The dry run swaps the CloudWatch client for an in-memory submitter, so
no AWS credentials are needed. With --submit, credentials come from the
default chain (environment, shared file, container or instance profile).
"""

import logging
import sys
import time

from cloudwatchput import CloudWatchPutOutput
from cloudwatchput.adapters.submitters.in_memory import InMemorySubmitter
from cloudwatchput.runtime.output import cloudwatch_submitter

logging.basicConfig(level=logging.INFO)

CONFIG = {
    "namespace": "Example/Requests",
    "metric_name": "Latency",
    "unit": "Milliseconds",
    "value_key": "latency_ms",
    "dimensions": [
        {"name": "host", "key": "host"},
        {"name": "env", "value": "dev"},
    ],
}

# One buffered chunk: (epoch seconds, record) pairs
now = int(time.time())
chunk = [
    (now - 2, {"latency_ms": "12.5", "host": "web1"}),
    (now - 1, {"latency_ms": 40, "host": "web2"}),
    (now, {"latency_ms": "7ms", "host": "web1"}),
]


def main(submit: bool) -> None:
    memory = InMemorySubmitter()
    factory = cloudwatch_submitter if submit else (lambda creds, config: memory)

    # Per-record datums
    output = CloudWatchPutOutput.from_mapping(CONFIG, submitter_factory=factory)
    output.start()
    print(f"submitted {output.write(chunk)} datums")

    # One statistic set for the whole chunk
    aggregated = CloudWatchPutOutput.from_mapping(
        {**CONFIG, "use_statistic_sets": True}, submitter_factory=factory
    )
    aggregated.start()
    print(f"submitted {aggregated.write(chunk)} statistic set")

    for datum in memory.metric_data():
        print(datum)


if __name__ == "__main__":
    main("--submit" in sys.argv)
