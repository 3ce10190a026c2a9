import logging
from dataclasses import dataclass, field


@dataclass(frozen=True)
class WindowDefaults:
    """Default window parameters, one entry per accepted window argument."""

    width: float = 1.0
    start: float = 0.0
    end: float = 1.0
    order: float = 1.0
    lb: float = 0.0
    invlb: float = 0.0
    center: float = 0.0


@dataclass(frozen=True)
class BaselineDefaults:
    smooth: float = 1.0


@dataclass(frozen=True)
class NusDefaults:
    """Defaults for the non-uniform sampling reconstructions."""

    ist_thresh: float = 0.9
    ist_iterations: int = 200
    irls_pa: float = 1.0
    irls_pb: float = 0.5
    irls_iterations: int = 50
    ffm_entropy: str = "hoch"
    ffm_iterations: int = 1000
    ffm_mu: float = 1.0
    tol: float = 1.0e-6


@dataclass(frozen=True)
class HxConfig:
    """Global defaults for nmr_hx processing functions."""

    window: WindowDefaults = field(default_factory=WindowDefaults)
    baseline: BaselineDefaults = field(default_factory=BaselineDefaults)
    nus: NusDefaults = field(default_factory=NusDefaults)


DEFAULTS = HxConfig()


def setup_logging(level: int | str = logging.INFO) -> None:
    """
    Route nmr_hx log records to stderr.

    The library itself only installs a NullHandler; call this from scripts
    that want to see reconstruction progress.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(name)s %(levelname)s: %(message)s")
    )
    logger = logging.getLogger("nmr_hx")
    logger.addHandler(handler)
    logger.setLevel(level)
