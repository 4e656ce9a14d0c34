"""Running page numbers, stamped once layout is final."""

import logging
from typing import List

from .canvas import DocumentCanvas
from .styles import GRAY, PAGE_NUMBER_Y, FontSet

logger = logging.getLogger(__name__)


def number_pages(canvas: DocumentCanvas, fonts: FontSet) -> List[str]:
    """Stamp ``index + 1`` at the top of every page except the cover.

    Labels match the page numbers quoted in the table of contents. Returns
    the labels in page order.
    """
    style = fonts.style("regular", 10, color=GRAY, align="center")
    labels = []
    for index in range(1, canvas.page_count):
        canvas.activate_page(index)
        label = str(index + 1)
        canvas.write(label, style, x=0, y=PAGE_NUMBER_Y, width=canvas.page_width, flow=False)
        labels.append(label)
    logger.debug(f"Numbered {len(labels)} pages")
    return labels
