"""
Configuration and secrets management utilities for Lambda.
"""

import json
import logging
from urllib.parse import quote_plus

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from document_ingestion.configs import DocumentPipelineSettings

logger = logging.getLogger(__name__)

PASSWORD_PLACEHOLDER = "placeholder"
REQUIRED_SETTINGS = ("vectors_bucket", "database_url")


def validate_environment(settings: DocumentPipelineSettings) -> None:
    """
    Validate required settings.

    Raises:
        ValueError: A required setting is empty
    """
    missing = [
        f"DOC_INGEST_{name.upper()}" for name in REQUIRED_SETTINGS if not getattr(settings, name)
    ]
    if missing:
        raise ValueError(f"Missing required environment variables: {', '.join(missing)}")

    logger.info("validate_environment - Environment validated")


def resolve_database_url(
    settings: DocumentPipelineSettings,
    client=None,
) -> DocumentPipelineSettings:
    """
    Fill the database password from Secrets Manager.

    Applies when the configured URL carries the 'placeholder' password and
    db_secret_arn is set. On failure the settings are returned unchanged and
    the lookup itself will fail later with a fetch error.

    Args:
        settings: Pipeline settings
        client: Secrets Manager client (created from boto3 if None)

    Returns:
        DocumentPipelineSettings: Settings with the resolved database_url
    """
    if PASSWORD_PLACEHOLDER not in settings.database_url or not settings.db_secret_arn:
        return settings

    try:
        if client is None:
            client = boto3.session.Session().client("secretsmanager")
        response = client.get_secret_value(SecretId=settings.db_secret_arn)
        secret = json.loads(response.get("SecretString") or "{}")
    except (ClientError, BotoCoreError, json.JSONDecodeError) as e:
        logger.error("resolve_database_url - Failed to fetch DB secret: %s", e)
        return settings

    password = secret.get("password")
    if not password:
        logger.warning("resolve_database_url - Secret has no password field")
        return settings

    database_url = settings.database_url.replace(PASSWORD_PLACEHOLDER, quote_plus(password), 1)
    logger.info("resolve_database_url - Updated database_url with secret")
    return settings.model_copy(update={"database_url": database_url})
