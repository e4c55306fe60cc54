import pytest

from services.workers.chart.io.ingest import sample_rows


@pytest.fixture
def sales_rows():
    return sample_rows()
