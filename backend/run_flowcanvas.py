import json
import logging
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.app.config import AppConfig  # noqa: E402
from backend.app.services.canvas_service import CanvasService  # noqa: E402
from flowcanvas.graph.graph_store import CanvasStore  # noqa: E402
from flowcanvas.graph.node_registry import NodeRegistry  # noqa: E402
from flowcanvas.mutations.mutation_queue import MutationQueue  # noqa: E402


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logger = logging.getLogger("flowcanvas.run")
    start = time.perf_counter()
    config = AppConfig().canvas

    service = CanvasService(
        store=CanvasStore(history_limit=config.queue.history_limit),
        queue=MutationQueue(config=config.queue),
        registry=NodeRegistry.default(config.ports),
        config=config,
    )
    start_node = service.store.get_nodes()[0]

    # start -> question -> end
    question = service.append_node("question", from_node_id=start_node.id).node
    end = service.append_node("end", from_node_id=question.id).node
    service.patch_node(question.id, {"data": {"variableName": "firstname"}})
    service.drain()

    # start -> information -> question -> end
    edge = service.dataset().edges[0]
    information = service.insert_node("information", edge_id=edge.id).node

    # start -> question -> end, relinked around the removed node
    service.remove_nodes([information.id])

    refused = service.connect(
        from_node_id=end.id,
        from_port_id=None,
        to_node_id=start_node.id,
    )
    logger.info("end -> start connection refused=%s", refused is None)

    logger.info("variables=%s", [v.name for v in service.variables()])
    result = service.validate()
    logger.info("valid=%s errors=%s warnings=%s", result.is_valid, result.errors, result.warnings)
    logger.info(json.dumps(service.dataset().to_dict(), indent=2))
    logger.info("done in %.3fs, %s mutation(s) applied", time.perf_counter() - start, len(service.store.history()))


if __name__ == "__main__":
    main()
