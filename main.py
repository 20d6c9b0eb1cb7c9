"""Entry point for the fxART studio.

Draw y = f(x; a, b, c) on a canvas, freeze curves to stack them, and
bucket-fill the regions between them.
"""

import logging
import sys

from PyQt6.QtWidgets import QApplication

from app_window import AppWindow


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    app = QApplication(sys.argv)
    window = AppWindow()
    window.show()

    # Compile the fill kernel before the first click
    _warmup_fill_kernel()

    sys.exit(app.exec())


def _warmup_fill_kernel():
    """Trigger Numba JIT compilation of the scanline fill."""
    import numpy as np
    from bucket._numba_kernels import scanline_fill

    scanline_fill(np.ones((2, 2), dtype=np.bool_), 0, 0)
    logging.getLogger(__name__).info("Fill kernel warmup complete")


if __name__ == "__main__":
    main()
