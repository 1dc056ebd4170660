from abc import ABC, abstractmethod

from plantscan.orchestrator.contracts import EncodedPayload, PlantFinding


class RecognitionClient(ABC):
    @abstractmethod
    async def submit(self, payload: EncodedPayload) -> tuple[PlantFinding, ...]:
        """Upload one frame. Returns findings (possibly empty).

        Raises TransportFailure or ServiceReportedFailure.
        """
        ...

    async def aclose(self):
        pass
