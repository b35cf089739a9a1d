from .stage_10_resolve_platform import ResolvePlatformStage
from .stage_20_prepare_staging import PrepareStagingStage
from .stage_30_stage_app import StageApplicationStage
from .stage_40_bundle_pydeps import BundlePydepsStage
from .stage_50_fetch_runtime import FetchRuntimeStage
from .stage_60_write_manifest import WriteManifestStage
from .stage_70_write_launcher import WriteLauncherStage
from .stage_80_pack_archive import PackArchiveStage

__all__ = [
    "ResolvePlatformStage",
    "PrepareStagingStage",
    "StageApplicationStage",
    "BundlePydepsStage",
    "FetchRuntimeStage",
    "WriteManifestStage",
    "WriteLauncherStage",
    "PackArchiveStage",
]
