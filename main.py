import argparse
import logging
import sys

from api.render_api import RenderConfigBuilder, build_api
from utils.enums import PrecisionMode, RedrawPolicy
from utils.backend_helpers import backend_from_name
from utils.errors import BackendInitError

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Interactive Mandelbrot viewer (w/a/s/d pan, e/q zoom)")
    p.add_argument("--width", type=int, default=800)
    p.add_argument("--height", type=int, default=600)
    p.add_argument("--max-iter", type=int, default=800)
    p.add_argument("--precision", choices=["f32", "f64"], default="f32")
    p.add_argument("--backend", choices=["auto", "opencl", "cpu"], default="auto")
    p.add_argument("--device", type=int, default=None, help="Device ordinal for the chosen backend")
    p.add_argument("--redraw-policy", choices=["drop", "latest"], default="drop",
                   help="What happens to view changes made while a frame is generating")
    p.add_argument("--log-level", default="INFO")
    return p.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        config = (RenderConfigBuilder()
                  .resolution(args.width, args.height)
                  .max_iter(args.max_iter)
                  .precision(PrecisionMode.Double if args.precision == "f64" else PrecisionMode.Single)
                  .backend(backend_from_name(args.backend), args.device)
                  .redraw_policy(RedrawPolicy[args.redraw_policy.upper()])
                  .build())
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return 2

    try:
        api = build_api(config)
    except BackendInitError as e:
        logger.error("Could not initialize a compute backend: %s", e)
        return 1

    try:
        from PySide6.QtWidgets import QApplication
        from ui.view import MandelbrotWindow

        app = QApplication(sys.argv[:1])
        viewer = MandelbrotWindow(api, config)
        viewer.show()
    except Exception as e:
        logger.error("Could not create display window: %s", e)
        api.shutdown()
        return 1

    api.request_redraw()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
