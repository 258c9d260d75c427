"""Infrastructure Layer for the metrics writer.

Concrete implementations behind the domain's ``MetricWriter`` interface:

- monitoring: wire model, API client, descriptor registry, batch writer,
  self-monitoring counters, and structured logging
- rate_limiting: the token bucket shared by all outbound calls
- config: environment-driven writer settings
- factory: assembles a writer from settings

Example usage:
    from cloud_metrics.infrastructure.config import WriterConfig
    from cloud_metrics.infrastructure.factory import create_writer

    writer = create_writer(WriterConfig.from_env())
    writer.write(point)
    writer.flush()
"""
