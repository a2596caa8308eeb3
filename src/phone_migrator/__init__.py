"""
phone-migrator - Engine Room AI phone system migration

Moves user and phone-line data between Twilio and RingCentral export
formats, either directly or following a step-by-step migration plan
proposed by Engine Room AI.

Architecture:
    - core: record schemas, conversion, plan models, plan service, step execution
    - llm: provider abstraction over the Anthropic API
    - wizard: the interactive state machine and its asyncio runner
    - settings: YAML-backed configuration
    - cli: typer commands and rich output

Example usage:
    from phone_migrator.core import MigrationConfig, SchemaFormat, migrate

    migrate(MigrationConfig(
        source_file="twilio.json",
        source_format=SchemaFormat.TWILIO,
        target_file="ringcentral.json",
        target_format=SchemaFormat.RINGCENTRAL,
    ))
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
