"""Show one document command."""

from ..config.TotemConfig import TotemConfig
from ..StageResult import StageResult
from ._run_with_provider import _run_with_provider
from .ConnectionSource import ConnectionSource
from .DocumentStorage import DocumentStorage


def cmd_get(collection: str, doc_id: str) -> StageResult:
    announce = f"Fetching {doc_id!r} from {collection}..."
    try:
        config = TotemConfig.load()
        doc = _run_with_provider(
            config,
            lambda provider: DocumentStorage(collection, ConnectionSource.shared(provider)).get(doc_id),
        )
    except Exception as e:
        return StageResult(announce=announce, result=f"Fetch failed: {e}", output={"error": str(e)}, success=False)

    if doc is None:
        return StageResult(
            announce=announce,
            result=f"Document {doc_id!r} not found",
            output={"id": doc_id, "document": None},
            success=False,
        )
    return StageResult(announce=announce, result="Found 1 document", output={"id": doc_id, "document": doc}, success=True)
