"""Test the SVG forecast table."""
from custom_components.harbor_conditions.render import ForecastRow, ForecastTable
from custom_components.harbor_conditions.svg_table import generate_forecast_table_svg


def test_empty_table():
    """Test a placeholder is drawn without forecast rows."""
    svg = generate_forecast_table_svg(None)

    assert svg.startswith("<svg")
    assert "No wind forecast available" in svg

    svg = generate_forecast_table_svg(ForecastTable(source="Open-Meteo", date_label="--", rows=[]))
    assert "No wind forecast available" in svg


def test_table_rows():
    """Test header, rows and footer are drawn and escaped."""
    table = ForecastTable(
        source="Windy.com",
        date_label="Jun 1",
        rows=[
            ForecastRow(time="12:00 PM", speed="10.0", gust="15.0", direction="225° (SW)"),
            ForecastRow(time="01:00 PM", speed="11.0", gust="<16.0>", direction="230° (SW)"),
        ],
    )

    svg = generate_forecast_table_svg(table, width=400)

    assert 'width="400"' in svg
    assert "Wind Forecast" in svg
    assert "Time (Jun 1)" in svg
    assert "12:00 PM" in svg
    assert "225° (SW)" in svg
    assert "&lt;16.0&gt;" in svg
    assert "Forecast from Windy.com" in svg
    assert svg.count('class="row-alt"') == 1
    assert svg.endswith("</svg>")
