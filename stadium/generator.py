import logging
import time
from typing import Optional

from .attachments import build_attachments
from .floodlights import build_floodlights
from .params import StadiumParams
from .pitch import build_pitch
from .roofs import build_roofs, plan_roofs
from .scene import StadiumScene
from .stands import add_stands_to_scene, generate_all_stands

logger = logging.getLogger(__name__)


def generate_stadium(scene: StadiumScene, params: Optional[StadiumParams] = None,
                     clear_scene: bool = True) -> StadiumScene:
    """
    Runs one build pass: validates the parameters, tears down the previous
    build and regenerates pitch, stands, roof, attachments and floodlights.

    Args:
        scene: The StadiumScene to build into.
        params: Parameter set; defaults when omitted.
        clear_scene: If True, releases everything the previous pass created first.

    Returns:
        The same scene, for chaining.

    Raises:
        ConfigurationError: If the parameters are invalid. The previous build
            is left untouched in that case.
    """
    params = (params or StadiumParams()).validate()
    # Stands and roof placements are computed up front so bad parameters fail before teardown
    stands = generate_all_stands(params)
    plan_roofs(params, stands)

    started = time.perf_counter()
    if clear_scene:
        released = scene.teardown()
        logger.debug("Teardown released %d resources", released)

    scene.begin_pass()
    build_pitch(scene, params.pitch)
    add_stands_to_scene(scene, stands)
    build_roofs(scene, params, stands)
    build_attachments(scene, params, stands)
    if params.floodlights.show:
        build_floodlights(scene, params)
    scene.end_pass()
    scene.params = params

    logger.info("Stadium generated in %.3fs: %d stands, %d live resources",
                time.perf_counter() - started, len(stands), scene.live_count())
    return scene


def regenerate(scene: StadiumScene, params: StadiumParams) -> StadiumScene:
    """Full teardown followed by a fresh build."""
    return generate_stadium(scene, params, clear_scene=True)
