"""
cpslabor_pipeline.pipelines — End-to-end pipeline orchestrators.

Each pipeline module exports a run() async function that returns a
PipelineResult.

    from cpslabor_pipeline.pipelines import nativity_indicators

    result = await nativity_indicators.run(scheme="arrival-cohort", dry_run=True)
"""
