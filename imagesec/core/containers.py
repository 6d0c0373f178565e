from __future__ import annotations

from imagesec.normalizers.bandit_normalizer import BanditNormalizer
from imagesec.normalizers.checkov_normalizer import CheckovNormalizer
from imagesec.normalizers.dockle_normalizer import DockleNormalizer
from imagesec.normalizers.gitleaks_normalizer import GitleaksNormalizer
from imagesec.normalizers.grype_normalizer import GrypeNormalizer
from imagesec.normalizers.hadolint_normalizer import HadolintNormalizer
from imagesec.normalizers.npm_audit_normalizer import NpmAuditNormalizer
from imagesec.normalizers.osv_normalizer import OsvNormalizer
from imagesec.normalizers.pip_audit_normalizer import PipAuditNormalizer
from imagesec.normalizers.registry import NormalizerRegistry
from imagesec.normalizers.safety_normalizer import SafetyNormalizer
from imagesec.normalizers.semgrep_normalizer import SemgrepNormalizer
from imagesec.normalizers.trivy_normalizer import TrivyNormalizer
from imagesec.normalizers.trufflehog_normalizer import TruffleHogNormalizer
from imagesec.scanners.compliance import CheckovScanner
from imagesec.scanners.container import (
    CosignScanner,
    DockerHistoryScanner,
    DockleScanner,
    GrypeContainerScanner,
    TrivyImageScanner,
)
from imagesec.scanners.dependency import (
    GrypeScanner,
    NpmAuditScanner,
    OsvScanner,
    PipAuditScanner,
    SafetyScanner,
    TrivyScanner,
)
from imagesec.scanners.malware import ClamAVScanner
from imagesec.scanners.registry import ScannerRegistry
from imagesec.scanners.sbom import SyftScanner
from imagesec.scanners.secrets import GitleaksScanner, TruffleHogScanner
from imagesec.scanners.static import BanditScanner, HadolintScanner, SemgrepScanner


def build_scanner_registry() -> ScannerRegistry:
    """Register every scanner, in the order a full scan runs them.

    To add a scanner:
    1. Subclass ``SecurityScanner`` (or ``ImageScanner``) in ``imagesec/scanners/``
    2. Add it here
    3. Add a normalizer below if it produces findings
    """
    return ScannerRegistry(
        [
            # basic: dependencies and Dockerfiles
            TrivyScanner(),
            SafetyScanner(),
            PipAuditScanner(),
            OsvScanner(),
            GrypeScanner(),
            NpmAuditScanner(),
            HadolintScanner(),
            # basic: container images
            TrivyImageScanner(),
            DockleScanner(),
            GrypeContainerScanner(),
            CosignScanner(),
            DockerHistoryScanner(),
            # advanced
            BanditScanner(),
            SemgrepScanner(),
            GitleaksScanner(),
            TruffleHogScanner(),
            CheckovScanner(),
            SyftScanner(),
            ClamAVScanner(),
        ]
    )


def build_normalizer_registry() -> NormalizerRegistry:
    return NormalizerRegistry(
        [
            TrivyNormalizer(),
            TrivyNormalizer(tool="trivy-image", vuln_type="CONTAINER"),
            GrypeNormalizer(),
            GrypeNormalizer(tool="grype-container", vuln_type="CONTAINER"),
            SafetyNormalizer(),
            PipAuditNormalizer(),
            OsvNormalizer(),
            NpmAuditNormalizer(),
            HadolintNormalizer(),
            DockleNormalizer(),
            BanditNormalizer(),
            SemgrepNormalizer(),
            GitleaksNormalizer(),
            TruffleHogNormalizer(),
            CheckovNormalizer(),
        ]
    )
