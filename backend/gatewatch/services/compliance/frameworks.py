"""
Compliance Framework Mapper

Translates posture signals into NIST SP 800-53, OWASP Top 10, PCI DSS and
GDPR control lists.

Only NIST is scored from live counters. OWASP, PCI and GDPR are served
from fixed catalogs with fixed scores and are labeled mode="static_catalog"
so consumers can tell the two apart.
"""

from typing import Dict

from ...models import ComplianceMetrics, ControlStatus, MetricsSummary, PostureSnapshot, ScoringMode, ThreatStatistics
from ...models.posture_models import (
    GdprBlock,
    GdprPrinciple,
    NistBlock,
    NistControl,
    OwaspBlock,
    OwaspRisk,
    PciBlock,
    PciRequirement,
)
from .constants import (
    GDPR_PRINCIPLES,
    GDPR_STATIC_SCORE,
    NIST_CONTROL_WEIGHT,
    NIST_CONTROLS,
    OWASP_STATIC_SCORE,
    OWASP_TOP10,
    PCI_REQUIREMENTS,
    PCI_STATIC_SCORE,
    round_half_up,
)


class ComplianceFrameworkMapper:
    """Build the four framework blocks from already-gathered signals."""

    def nist_control_statuses(self, metrics: MetricsSummary, threats: ThreatStatistics) -> Dict[str, ControlStatus]:
        """
        Account management counts as compliant only once a lockout has
        been observed; the remaining controls are backed by mechanisms that
        are always present in the gateway.
        """
        return {
            "AC-2": ControlStatus.COMPLIANT if metrics.auth_stats.account_lockouts > 0 else ControlStatus.PARTIAL,
            "AC-7": ControlStatus.COMPLIANT,
            "SI-4": ControlStatus.COMPLIANT,
            "SC-5": ControlStatus.COMPLIANT,
        }

    def nist(self, metrics: MetricsSummary, threats: ThreatStatistics) -> NistBlock:
        statuses = self.nist_control_statuses(metrics, threats)
        controls = [
            NistControl(id=c["id"], name=c["name"], status=statuses[c["id"]], evidence=list(c["evidence"]))
            for c in NIST_CONTROLS
        ]
        earned = sum(NIST_CONTROL_WEIGHT for c in controls if c.status == ControlStatus.COMPLIANT)
        total = NIST_CONTROL_WEIGHT * len(controls)
        score = round_half_up(earned / total * 100) if total else 0
        return NistBlock(score=score, mode=ScoringMode.LIVE, controls=controls)

    def owasp(self) -> OwaspBlock:
        return OwaspBlock(
            score=OWASP_STATIC_SCORE,
            mode=ScoringMode.STATIC_CATALOG,
            top10=[OwaspRisk(**entry) for entry in OWASP_TOP10],
        )

    def pci(self) -> PciBlock:
        return PciBlock(
            score=PCI_STATIC_SCORE,
            mode=ScoringMode.STATIC_CATALOG,
            requirements=[PciRequirement(**entry) for entry in PCI_REQUIREMENTS],
        )

    def gdpr(self) -> GdprBlock:
        return GdprBlock(
            score=GDPR_STATIC_SCORE,
            mode=ScoringMode.STATIC_CATALOG,
            principles=[GdprPrinciple(**entry) for entry in GDPR_PRINCIPLES],
        )

    def map(self, posture: PostureSnapshot, metrics: MetricsSummary, threats: ThreatStatistics) -> ComplianceMetrics:
        # posture is accepted so framework scoring can draw on factor scores;
        # none of the current catalogs do
        return ComplianceMetrics(
            nist=self.nist(metrics, threats),
            owasp=self.owasp(),
            pci=self.pci(),
            gdpr=self.gdpr(),
        )
