import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from user_provisioning.services.exceptions import CompensationError

logger = logging.getLogger("user_provisioning.saga")

Action = Callable[[Dict[str, Any]], Any]
Compensation = Callable[[Dict[str, Any]], None]


@dataclass
class SagaStep:
    name: str
    action: Action
    compensation: Optional[Compensation] = None


class Saga:
    """
    하나의 트랜잭션으로 묶을 수 없는 여러 외부 시스템에 걸친 작업을 순서대로 실행합니다.

    각 단계는 (실행, 보상) 쌍이며, 실행 결과는 context[단계 이름]에 저장되어 다음 단계에서 사용할 수 있습니다.
    어떤 단계가 실패하면 이미 완료된 단계들의 보상 작업을 역순으로 실행한 뒤, 원래 예외를 그대로 다시 던집니다.
    보상 작업의 실패는 로그로만 남고, 원래 예외를 가리지 않습니다.
    """

    def __init__(self, name: str):
        self.name = name
        self.steps: List[SagaStep] = []

    def step(self, name: str, action: Action, compensation: Optional[Compensation] = None) -> "Saga":
        self.steps.append(SagaStep(name, action, compensation))
        return self

    def run(self, context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        모든 단계를 실행합니다.

        Returns:
            각 단계의 결과가 담긴 context 딕셔너리.

        Raises:
            실패한 단계가 던진 원래 예외.
        """
        context = {} if context is None else context
        completed: List[SagaStep] = []

        for step in self.steps:
            logger.info("[%s] step '%s' started", self.name, step.name)
            try:
                context[step.name] = step.action(context)
            except Exception as e:
                logger.error("[%s] step '%s' failed: %s", self.name, step.name, e)
                self._compensate(completed, context)
                raise
            completed.append(step)

        return context

    def _compensate(self, completed: List[SagaStep], context: Dict[str, Any]) -> None:
        for step in reversed(completed):
            if step.compensation is None:
                continue
            try:
                step.compensation(context)
                logger.warning("[%s] compensated step '%s'", self.name, step.name)
            except Exception as e:
                failure = CompensationError(f"Compensation for step '{step.name}' failed: {e}")
                logger.error("[%s] %s", self.name, failure, exc_info=True)
