import logging
from shared.observability import ecomm_saga_compensation_total

logger = logging.getLogger(__name__)

STARTED = "Started"
DONE = "Done"

class SagaStep:
    def __init__(self, name, action, compensation=None):
        self.name = name
        self.action = action
        self.compensation = compensation

class SagaOrchestrator:
    """
    Runs steps strictly in order. `state` is the name of the last step that
    finished, so a failed run tells exactly how far it got.
    """

    def __init__(self):
        self.steps = []
        self.state = STARTED

    def add_step(self, name: str, action, compensation=None):
        """Builder pattern to add a step and its rollback compensation."""
        self.steps.append(SagaStep(name, action, compensation))
        return self

    async def execute(self, ctx: dict):
        """Executes steps sequentially. Triggers rollback on any exception."""
        executed_steps = []
        for step in self.steps:
            try:
                await step.action(ctx)
            except Exception as e:
                logger.warning(f"Saga failed at step '{step.name}' after '{self.state}': {e}")
                await self._rollback(executed_steps, ctx)
                raise
            executed_steps.append(step)
            self.state = step.name
        self.state = DONE
        return ctx

    async def _rollback(self, executed_steps: list, ctx: dict):
        """Executes compensations in reverse order. Wraps each in a try/except."""
        for step in reversed(executed_steps):
            if step.compensation:
                try:
                    await step.compensation(ctx)
                    logger.info(f"Rollback successful for step '{step.name}'")
                    ecomm_saga_compensation_total.labels(step_name=step.name).inc()
                except Exception as ce:
                    # A failing compensation MUST NOT block other compensations
                    logger.critical(f"CRITICAL: Compensation failed for '{step.name}'. Manual intervention may be required. Error: {ce}")
