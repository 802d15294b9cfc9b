"""Custom exceptions for configuration and input validation."""


class ConfigurationError(Exception):
    """Raised when configuration validation finds critical issues.

    This exception is raised by :meth:`Config.validate_or_raise` when the configuration
    contains critical issues that would lead to meaningless simulation
    results.

    Attributes:
        issues: List of specific configuration problems found.

    Examples:
        Catching and inspecting issues::

            try:
                config.validate_or_raise()
            except ConfigurationError as e:
                for issue in e.issues:
                    print(f"  - {issue}")
    """

    def __init__(self, issues: list[str]) -> None:
        self.issues = issues
        bullet_list = "\n".join(f"  - {issue}" for issue in issues)
        super().__init__(
            f"Configuration has {len(issues)} critical "
            f"{'issue' if len(issues) == 1 else 'issues'}:\n{bullet_list}"
        )


class PortfolioError(ValueError):
    """Raised when a portfolio allocation is missing or malformed.

    A missing portfolio is a caller error; the engine refuses to run rather
    than silently simulating an empty garden.
    """
