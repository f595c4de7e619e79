#!/usr/bin/env python3
"""
gemara2oscal CLI - convert Gemara compliance documents to OSCAL

Converts Gemara guidance documents, control catalogs and control evaluations
into OSCAL v1.1.3 Catalogs, Component Definitions and Assessment Results,
and validates the output with NIST oscal-cli.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler

from .mappers import AssessmentResultsMapper, CatalogMapper, ComponentDefinitionBuilder, ConversionError
from .readers import (
    AssessmentPlanReader,
    CatalogReader,
    EvaluationReader,
    GuidanceReader,
    ParameterModifierReader,
)
from .validation import GemaraValidator, OSCALValidator
from .validation.schema_validator import (
    CATALOG_SCHEMA,
    EVALUATIONS_SCHEMA,
    GUIDANCE_SCHEMA,
    PARAMETER_MODIFIERS_SCHEMA,
)

console = Console()
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
    handlers=[RichHandler(console=console, show_time=False, show_path=False)]
)
logger = logging.getLogger("gemara2oscal")

ENVVAR_PREFIX = "GEMARA2OSCAL"

READ_ERRORS = (FileNotFoundError, ValueError, yaml.YAMLError, json.JSONDecodeError)


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--quiet', '-q', is_flag=True, help='Suppress non-error output')
@click.option('--skip-input-validation', is_flag=True,
              help='Do not check Gemara inputs against their JSON schemas')
@click.pass_context
def cli(ctx, verbose: bool, quiet: bool, skip_input_validation: bool):
    """gemara2oscal - convert Gemara compliance documents to OSCAL"""
    ctx.ensure_object(dict)

    if quiet:
        logging.getLogger().setLevel(logging.WARNING)
    elif verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    ctx.obj['verbose'] = verbose
    ctx.obj['validator'] = None if skip_input_validation else GemaraValidator()


def _fail(ctx, message: str, error: Optional[Exception] = None) -> None:
    """Log an error and exit with status 1"""
    logger.error(message)
    if error is not None and ctx.obj.get('verbose'):
        logger.exception(error)
    sys.exit(1)


def _check_input(ctx, data: Any, schema_name: str, source: Path) -> None:
    """Validate an input document unless validation is disabled"""
    validator = ctx.obj.get('validator')
    if validator is None:
        return
    if not validator.validate(data, schema_name):
        _fail(ctx, f"Input validation failed for {source}")


def _write_artifact(output: Path, file_name: str, artifact: Dict[str, Any]) -> Path:
    """Write an OSCAL artifact as JSON"""
    output.mkdir(parents=True, exist_ok=True)
    output_path = output / file_name
    with open(output_path, 'w') as f:
        json.dump(artifact, f, indent=2, ensure_ascii=False)
    logger.info(f"Generated: {output_path}")
    return output_path


def _split_option(value: str, parts: int, option: str) -> Tuple[str, ...]:
    """Split a NAME:...:PATH option value"""
    fields = value.split(":", parts - 1)
    if len(fields) != parts or not all(fields):
        raise click.BadParameter(f"expected {parts} ':'-separated fields, got '{value}'", param_hint=option)
    return tuple(fields)


@cli.command()
@click.argument('guidance', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--output', '-o', type=click.Path(file_okay=False, path_type=Path),
              default=Path('dist/oscal'), show_default=True, help='Output directory for OSCAL artifacts')
@click.pass_context
def catalog(ctx, guidance: Path, output: Path):
    """Convert a Gemara guidance document to an OSCAL Catalog"""
    try:
        document = GuidanceReader(guidance).read()
    except READ_ERRORS as e:
        _fail(ctx, f"Failed to read {guidance}: {e}", e)

    _check_input(ctx, document, GUIDANCE_SCHEMA, guidance)

    try:
        oscal_catalog = CatalogMapper().map(document)
    except ConversionError as e:
        _fail(ctx, f"Catalog conversion failed: {e}", e)

    _write_artifact(output, "catalog.json", oscal_catalog)


@cli.command()
@click.option('--title', required=True, help='Title of the component definition')
@click.option('--version', 'doc_version', default='0.1.0', show_default=True,
              help='Version of the component definition')
@click.option('--target', 'targets', multiple=True, metavar='NAME:TYPE:CATALOG',
              help='Target component built from a Gemara control catalog')
@click.option('--validation', 'validations', multiple=True, metavar='NAME:EVALUATIONS',
              help='Validation component built from Gemara control evaluations')
@click.option('--modifiers', 'modifier_files', multiple=True,
              type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='Gemara parameter modifiers to apply to a target component')
@click.option('--output', '-o', type=click.Path(file_okay=False, path_type=Path),
              default=Path('dist/oscal'), show_default=True, help='Output directory for OSCAL artifacts')
@click.pass_context
def component(ctx, title: str, doc_version: str, targets: List[str], validations: List[str],
              modifier_files: List[Path], output: Path):
    """Build an OSCAL Component Definition from Gemara catalogs and evaluations"""
    if not targets and not validations:
        _fail(ctx, "At least one --target or --validation component is required")

    builder = ComponentDefinitionBuilder(title, doc_version)

    try:
        for target in targets:
            name, component_type, path = _split_option(target, 3, '--target')
            control_catalog = CatalogReader(Path(path)).read()
            _check_input(ctx, control_catalog, CATALOG_SCHEMA, Path(path))
            builder.add_target_component(name, component_type, control_catalog)

        for validation in validations:
            name, path = _split_option(validation, 2, '--validation')
            evaluations = EvaluationReader(Path(path)).read()
            _check_input(ctx, evaluations, EVALUATIONS_SCHEMA, Path(path))
            builder.add_validation_component(name, evaluations)

        for modifier_file in modifier_files:
            modifiers = ParameterModifierReader(modifier_file).read()
            _check_input(ctx, modifiers, PARAMETER_MODIFIERS_SCHEMA, modifier_file)
            builder.add_parameter_modifiers(modifiers["reference-id"], modifiers["parameter-modifiers"])
    except READ_ERRORS as e:
        _fail(ctx, f"Failed to read component inputs: {e}", e)

    _write_artifact(output, "component-definition.json", builder.build())


@cli.command()
@click.argument('plan', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument('evaluation_files', nargs=-1, required=True,
                type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--plan-href', help='href used to import the assessment plan (default: PLAN path)')
@click.option('--output', '-o', type=click.Path(file_okay=False, path_type=Path),
              default=Path('dist/oscal'), show_default=True, help='Output directory for OSCAL artifacts')
@click.pass_context
def results(ctx, plan: Path, evaluation_files: List[Path], plan_href: Optional[str], output: Path):
    """Convert Gemara control evaluations to OSCAL Assessment Results"""
    evaluations = []
    try:
        assessment_plan = AssessmentPlanReader(plan).read()
        for evaluation_file in evaluation_files:
            loaded = EvaluationReader(evaluation_file).read()
            _check_input(ctx, loaded, EVALUATIONS_SCHEMA, evaluation_file)
            evaluations.extend(loaded)
    except READ_ERRORS as e:
        _fail(ctx, f"Failed to read assessment inputs: {e}", e)

    try:
        assessment_results = AssessmentResultsMapper().map(plan_href or str(plan), assessment_plan, evaluations)
    except ConversionError as e:
        _fail(ctx, f"Assessment results conversion failed: {e}", e)

    _write_artifact(output, "assessment-results.json", assessment_results)


@cli.command()
@click.argument('oscal_dir', type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option('--oscal-cli-path', default='oscal-cli', show_default=True,
              help='Path to oscal-cli executable')
@click.option('--output', '-o', type=click.Path(dir_okay=False, path_type=Path),
              help='Output file for the validation summary')
@click.pass_context
def validate(ctx, oscal_dir: Path, oscal_cli_path: str, output: Optional[Path]):
    """Validate generated OSCAL artifacts with NIST oscal-cli"""
    try:
        validator = OSCALValidator(oscal_cli_path)
    except RuntimeError as e:
        _fail(ctx, str(e), e)

    validation_results = validator.validate_directory(oscal_dir)

    if output:
        with open(output, 'w') as f:
            json.dump(validation_results, f, indent=2)
        logger.info(f"Validation summary written to: {output}")
    else:
        console.print_json(data=validation_results)

    invalid = [path for path, result in validation_results.items() if not result["valid"]]
    if invalid:
        _fail(ctx, f"{len(invalid)} of {len(validation_results)} OSCAL files failed validation")

    logger.info(f"All {len(validation_results)} OSCAL files are valid")


@cli.command()
@click.option('--check-deps', is_flag=True, help='Check required dependencies')
@click.option('--check-oscal-cli', is_flag=True, help='Check NIST oscal-cli availability')
@click.option('--oscal-cli-path', default='oscal-cli', show_default=True,
              help='Path to oscal-cli executable')
def doctor(check_deps: bool, check_oscal_cli: bool, oscal_cli_path: str):
    """Diagnostic tool for gemara2oscal installation"""
    if check_deps or not (check_deps or check_oscal_cli):
        _check_python_deps()

    if check_oscal_cli or not (check_deps or check_oscal_cli):
        _check_oscal_cli(oscal_cli_path)


def _check_python_deps():
    """Check Python dependencies"""
    required = ['yaml', 'jsonschema', 'click', 'rich']
    missing = []

    for pkg in required:
        try:
            __import__(pkg)
        except ImportError:
            missing.append(pkg)

    if missing:
        logger.error(f"Missing Python dependencies: {', '.join(missing)}")
        logger.info("Run: pip install -e .")
    else:
        logger.info("All Python dependencies satisfied")


def _check_oscal_cli(oscal_cli_path: str):
    """Check NIST oscal-cli availability"""
    try:
        OSCALValidator(oscal_cli_path)
        logger.info("oscal-cli found")
    except RuntimeError as e:
        logger.error(str(e))


def main():
    """Console script entry point"""
    cli(auto_envvar_prefix=ENVVAR_PREFIX)


if __name__ == '__main__':
    main()
