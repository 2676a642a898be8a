"""List collections command."""

from ..config.TotemConfig import TotemConfig
from ..StageResult import StageResult
from ._run_with_provider import _run_with_provider
from .ConnectionProvider import ConnectionProvider


async def _list_collections(provider: ConnectionProvider) -> list[str]:
    return sorted(await provider.init().list_collections())


def cmd_list() -> StageResult:
    """List available collections.

    Returns:
        StageResult with the sorted collection names
    """
    announce = "Listing collections..."
    try:
        config = TotemConfig.load()
        names = _run_with_provider(config, _list_collections)
    except Exception as e:
        return StageResult(
            announce=announce,
            result=f"Failed to list collections: {e}",
            output={"error": str(e), "collections": []},
            success=False,
        )

    return StageResult(
        announce=announce,
        result=f"Found {len(names)} collection(s)",
        output={"collections": names},
        success=True,
    )
