"""SVG wind forecast table generator."""
from __future__ import annotations

from html import escape

from .render import ForecastTable

HEADERS = ("Time", "Wind (kts)", "Gusts (kts)", "Direction")


def generate_forecast_table_svg(
    table: ForecastTable | None,
    width: int = 480,
    row_height: int = 22,
) -> str:
    """Generate an SVG table of the hourly wind forecast.

    Args:
        table: Rendered forecast table (rows of display text)
        width: Table width in pixels (default: 480)
        row_height: Height of each row in pixels (default: 22)

    Returns:
        SVG markup as a string
    """
    if table is None or not table.rows:
        return _generate_empty_table(width, 120, "No wind forecast available")

    padding = 20
    title_height = 40
    footer_height = 30
    height = title_height + row_height * (len(table.rows) + 1) + footer_height + padding

    # Time, speed, gust, direction
    column_fractions = (0.25, 0.2, 0.2, 0.35)
    table_width = width - 2 * padding
    column_x = []
    x = padding
    for fraction in column_fractions:
        column_x.append(x + 8)
        x += fraction * table_width

    svg_parts = [
        f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 {width} {height}" width="{width}" height="{height}">',
        '  <defs>',
        '    <style>',
        '      .table-bg { fill: #1a1a1a; }',
        '      .header-bg { fill: #2b3a4a; }',
        '      .row-alt { fill: #242424; }',
        '      .grid-line { stroke: #444; stroke-width: 1; }',
        '      .text { fill: #ccc; font-family: Arial, sans-serif; font-size: 12px; }',
        '      .header { fill: #fff; font-family: Arial, sans-serif; font-size: 12px; font-weight: bold; }',
        '      .title { fill: #fff; font-family: Arial, sans-serif; font-size: 16px; font-weight: bold; }',
        '      .footer { fill: #888; font-family: Arial, sans-serif; font-size: 11px; }',
        '    </style>',
        '  </defs>',
        '',
        f'  <rect width="{width}" height="{height}" class="table-bg"/>',
        f'  <text x="{width/2}" y="26" text-anchor="middle" class="title">Wind Forecast</text>',
        '',
    ]

    # Header row, dated by the first forecast hour
    y = title_height
    svg_parts.append(f'  <rect x="{padding}" y="{y}" width="{table_width}" height="{row_height}" class="header-bg"/>')
    header_labels = (f"{HEADERS[0]} ({escape(table.date_label)})",) + HEADERS[1:]
    for cx, label in zip(column_x, header_labels):
        svg_parts.append(f'  <text x="{cx}" y="{y + row_height - 7}" class="header">{label}</text>')

    for i, row in enumerate(table.rows):
        y = title_height + row_height * (i + 1)
        if i % 2:
            svg_parts.append(f'  <rect x="{padding}" y="{y}" width="{table_width}" height="{row_height}" class="row-alt"/>')
        cells = (row.time, row.speed, row.gust, row.direction)
        for cx, cell in zip(column_x, cells):
            svg_parts.append(f'  <text x="{cx}" y="{y + row_height - 7}" class="text">{escape(cell)}</text>')

    bottom = title_height + row_height * (len(table.rows) + 1)
    svg_parts.append(f'  <line x1="{padding}" y1="{bottom}" x2="{width - padding}" y2="{bottom}" class="grid-line"/>')

    days = len(table.rows) / 24
    svg_parts.append(
        f'  <text x="{padding}" y="{bottom + 20}" class="footer">'
        f'Forecast from {escape(table.source)}. Displaying next ~{days:g} days.</text>'
    )

    svg_parts.append('</svg>')

    return '\n'.join(svg_parts)


def _generate_empty_table(width: int, height: int, message: str) -> str:
    """Generate an empty table with a message."""
    return f'''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 {width} {height}" width="{width}" height="{height}">
  <rect width="{width}" height="{height}" fill="#1a1a1a"/>
  <text x="{width/2}" y="{height/2}" text-anchor="middle" fill="#ccc" font-family="Arial" font-size="16">{message}</text>
</svg>'''
