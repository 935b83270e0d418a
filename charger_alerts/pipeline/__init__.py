from .orchestrator import ChargerAlertPipeline, PipelineResult, PipelineServices

__all__ = ["ChargerAlertPipeline", "PipelineResult", "PipelineServices"]
