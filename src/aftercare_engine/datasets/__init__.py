from aftercare_engine.datasets.reference import ReferenceDatasetGenerator
from aftercare_engine.datasets.templates import (
    EVERGREEN_TEMPLATE,
    STANDARD_TEMPLATE,
    load_template,
    template_from_mapping,
)

__all__ = [
    "EVERGREEN_TEMPLATE",
    "STANDARD_TEMPLATE",
    "ReferenceDatasetGenerator",
    "load_template",
    "template_from_mapping",
]
