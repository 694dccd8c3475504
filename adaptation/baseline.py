from dataclasses import dataclass, field

from adaptation.frustration import DEFAULT_FRUSTRATION
from adaptation.policy import DEFAULT_POLICY, DecisionRequest, decide
from config.settings import FrustrationConfig, PolicyConfig
from data.models import DecisionResult, Provenance


@dataclass
class BaselineAdapter:
    """
    Локальный адаптер: то же правило, что и на сервере, но в процессе игры.
    Никогда не падает по сети, поэтому служит fallback-ом.
    """

    policy: PolicyConfig = field(default_factory=lambda: DEFAULT_POLICY)
    frustration: FrustrationConfig = field(default_factory=lambda: DEFAULT_FRUSTRATION)
    provenance: Provenance = Provenance.LOCAL

    def decide(self, req: DecisionRequest) -> DecisionResult:
        return decide(req, self.policy, self.frustration, provenance=self.provenance)
