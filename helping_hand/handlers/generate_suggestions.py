"""
Lambda handler for generating a user's weekly suggestions.
"""
from typing import Dict, Optional
import json
import asyncio

from aws_lambda_powertools import Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError

from helping_hand.config import GenerationSettings
from helping_hand.models.suggestion import GenerateSuggestionsRequest
from helping_hand.services.exceptions import CollaboratorFetchError, MissingAssessmentError
from helping_hand.services.generator import SuggestionGenerator
from helping_hand.services.stores import (
    HintStore,
    ProfileStore,
    RelationshipStore,
    StatusStore,
    SuggestionStore,
)
from helping_hand.services.template_repository import TemplateRepository
from helping_hand.utils.logging import logger

tracer = Tracer()

# Created on first invocation and reused while the container is warm
_generator: Optional[SuggestionGenerator] = None


def get_generator() -> SuggestionGenerator:
    """Get or create the generator wired to the DynamoDB stores."""
    global _generator
    if _generator is None:
        settings = GenerationSettings.from_env()
        _generator = SuggestionGenerator(
            templates=TemplateRepository(settings.templates_path),
            status_store=StatusStore(),
            relationship_store=RelationshipStore(),
            profile_store=ProfileStore(),
            hint_store=HintStore(),
            suggestion_store=SuggestionStore(),
            settings=settings
        )
    return _generator


def _response(status_code: int, body: Dict) -> Dict:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body)
    }


def parse_request(event: Dict) -> GenerateSuggestionsRequest:
    """
    Read the generation request from an API Gateway event or a direct invocation.

    Raises:
        ValidationError: If the body is not a JSON object or a field is missing or malformed
        ValueError: If the body is not valid JSON
    """
    body = event.get("body")
    if body is None:
        payload = event
    elif isinstance(body, str):
        payload = json.loads(body)
    else:
        payload = body
    return GenerateSuggestionsRequest.model_validate(payload)


@logger.inject_lambda_context
@tracer.capture_lambda_handler
def handler(event: Dict, context: LambdaContext) -> Dict:
    """
    Handle a weekly suggestion generation request.

    Args:
        event: API Gateway event whose body holds user_id, relationship_id,
            week_start_date and optional regenerate
        context: Lambda context

    Returns:
        Lambda response with the generated suggestions
    """
    try:
        request = parse_request(event)
    except (ValidationError, ValueError) as e:
        logger.warning("Invalid generation request", extra={"error": str(e)})
        return _response(400, {"error": str(e)})

    logger.append_keys(user_id=request.user_id)

    try:
        result = asyncio.run(get_generator().generate(request))
    except MissingAssessmentError as e:
        logger.warning("Weekly assessment missing", extra={
            "week_start_date": request.week_start_date.isoformat()
        })
        return _response(409, {"error": str(e)})
    except CollaboratorFetchError as e:
        logger.exception("Failed to gather context", extra={"collaborator": e.collaborator})
        return _response(502, {"error": str(e)})
    except Exception as e:
        logger.exception("Error generating suggestions", extra={
            "error_type": e.__class__.__name__
        })
        return _response(500, {"error": "Internal error generating suggestions"})

    logger.info("Returning weekly suggestions", extra={
        "suggestion_count": len(result.suggestions),
        "reused": result.reused
    })
    return _response(200, result.model_dump(mode="json"))
