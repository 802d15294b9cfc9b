"""Custom warning classes for the climate_garden package.

These warning classes allow users to programmatically filter, suppress,
or capture warnings using Python's standard ``warnings`` module.

Example:
    Suppress all configuration warnings in a batch run::

        import warnings
        from climate_garden._warnings import ConfigurationWarning

        warnings.filterwarnings("ignore", category=ConfigurationWarning)

    Capture data-quality warnings during a simulation::

        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always", DataQualityWarning)
            # ... run simulation ...
            quality_issues = [x for x in w if issubclass(x.category, DataQualityWarning)]
"""


class ClimateGardenWarning(UserWarning):
    """Base class for all climate_garden warnings."""


class ConfigurationWarning(ClimateGardenWarning):
    """Unusual or potentially incorrect configuration parameters.

    Raised when inputs are accepted but look suspicious, e.g. portfolio
    categories the engine does not recognise or allocations that do not
    add up to a full garden.
    """


class DataQualityWarning(ClimateGardenWarning):
    """Runtime data-quality observations.

    Raised when the simulation substitutes a safe default for a non-finite
    parameter or sample, or drops non-finite iterations before aggregation.
    """
