"""Creates a SVG file of a DIN A4 page (portrait format)
showing a closed spline through a handful of knots:
the spline stroke, a ribbon along the spline and arrow markers
placed at even length steps along the spline.
"""
from pathlib import Path

import svgwrite

from bezspline.spline import Spline

OUTPUT_FILE = "data/output/example/svg/din_a4_page_spline.svg"

CANVAS_UNIT = "mm"  # Units for CANVAS dimensions
CANVAS_WIDTH = 210  # DIN A4 page width in mm
CANVAS_HEIGHT = 297  # DIN A4 page height in mm

KNOTS = [(40, 60), (150, 40), (170, 150), (110, 240), (50, 170)]
RIBBON_WIDTH = 6  # ribbon width in mm
MARKER_STEP = 20  # distance of the markers along the spline in mm


def main(output_file=OUTPUT_FILE):
    """Builds the spline, normalizes it so that t follows the length,
    then adds stroke, ribbon and markers to the drawing.
    Finally, it saves the drawing to a SVG file.
    """
    Path(output_file).parent.mkdir(parents=True, exist_ok=True)

    spline = Spline(KNOTS, closed=True)
    # t of the normalized spline advances by 1 for every MARKER_STEP mm
    normalized = spline.normalize(MARKER_STEP)

    # Set up the SVG canvas: 1 user unit = 1 mm
    dwg = svgwrite.Drawing(output_file,
                           size=(f"{CANVAS_WIDTH}{CANVAS_UNIT}", f"{CANVAS_HEIGHT}{CANVAS_UNIT}"),
                           viewBox=f"0 0 {CANVAS_WIDTH} {CANVAS_HEIGHT}",
                           profile="full",
                           )

    # Ribbon, one quadrilateral per curve
    dwg.add(dwg.path(d=spline.fill(RIBBON_WIDTH), fill="lightsteelblue", stroke="none"))

    # Spline
    dwg.add(dwg.path(d=spline.stroke(), stroke="black", stroke_width=0.5, fill="none"))

    # Markers pointing along the spline
    for t in range(normalized.segment_count):
        marker = dwg.polygon(points=[(-2, -1.5), (3, 0), (-2, 1.5)], fill="crimson")
        marker["transform"] = normalized.point_transform(t)
        dwg.add(marker)

    # Save the SVG file
    dwg.saveas(output_file, pretty=True, indent=2)


if __name__ == "__main__":
    main()
