import asyncio
import logging
from typing import Optional

from flask import Blueprint, Flask, current_app, jsonify, request

from config import GeneratorSettings
from content_tools import generate_section_content, get_site_creation_guidance, optimize_for_seo
from errors import GenerationFailure, ProviderUnavailable, RefinementFailure
from model_client import LangChainModelClient, ModelClient
from refine import RefinementRequest, refine_website
from suggestions import Task, combine_tasks, suggest_improvements

logger = logging.getLogger(__name__)

bp = Blueprint("generator", __name__)


def create_app(settings: Optional[GeneratorSettings] = None,
               model_client: Optional[ModelClient] = None) -> Flask:
    app = Flask(__name__)
    app.config["GENERATOR_SETTINGS"] = settings or GeneratorSettings.from_env()
    app.config["MODEL_CLIENT"] = model_client
    app.register_blueprint(bp)
    return app


def get_settings() -> GeneratorSettings:
    return current_app.config["GENERATOR_SETTINGS"]


def get_model_client() -> ModelClient:
    """Return the configured client, building the LangChain one on first use."""
    client = current_app.config.get("MODEL_CLIENT")
    if client is None:
        client = LangChainModelClient(get_settings())
        current_app.config["MODEL_CLIENT"] = client
    return client


def get_payload() -> dict:
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


async def _with_timeout(coro, timeout: float):
    if not timeout or timeout <= 0:
        return await coro
    try:
        return await asyncio.wait_for(coro, timeout)
    except asyncio.TimeoutError:
        raise RefinementFailure(f"Refinement timed out after {timeout:g}s")


def run_refinement(html_content: str, change_request: str) -> str:
    """Refine a page, retrying failed attempts as configured."""
    settings = get_settings()
    client = get_model_client()
    refinement = RefinementRequest(html_content=html_content, request=change_request)

    last_error = None
    for attempt in range(max(1, settings.refine_max_attempts)):
        try:
            result = asyncio.run(_with_timeout(
                refine_website(refinement, client, settings),
                settings.refine_timeout_seconds,
            ))
            return result.refined_html_content
        except RefinementFailure as e:
            last_error = e
            logger.warning("Refinement attempt %d failed: %s", attempt + 1, e)
            if isinstance(e.__cause__, ProviderUnavailable):
                break
    raise last_error


@bp.errorhandler(ProviderUnavailable)
def provider_unavailable(e):
    return jsonify({'error': f'Failed to initialize LLM: {e}'}), 500


@bp.errorhandler(GenerationFailure)
def generation_failed(e):
    if isinstance(e.__cause__, ProviderUnavailable):
        return provider_unavailable(e.__cause__)
    logger.error("Generation failed: %s", e)
    if isinstance(e, RefinementFailure):
        message = "Sorry, I couldn't make that change. Please try rephrasing your request."
    else:
        message = "The AI model did not return a usable answer. Please try again."
    return jsonify({'error': message, 'detail': str(e)}), 500


@bp.route('/refine', methods=['POST'])
def refine():
    """Apply a free-text change request to the current page."""
    data = get_payload()
    html_content = data.get('htmlContent', '')
    change_request = (data.get('request') or '').strip()
    if not html_content or not change_request:
        return jsonify({'error': 'Current HTML and a change request are required'}), 400

    logger.info("/refine - request: '%s'", change_request[:100])
    refined = run_refinement(html_content, change_request)
    return jsonify({'success': True, 'refinedHtmlContent': refined})


@bp.route('/apply-tasks', methods=['POST'])
def apply_tasks():
    """Apply the selected suggested tasks as one combined refinement."""
    data = request.get_json(silent=True) or {}
    html_content = data.get('htmlContent', '')
    selected_ids = data.get('selectedTaskIds') or []
    try:
        tasks = [
            Task(id=t['id'], description=t['description'], is_completed=t.get('isCompleted', False))
            for t in data.get('tasks') or []
        ]
    except (KeyError, TypeError, ValueError) as e:
        return jsonify({'error': f'Invalid tasks payload: {e}'}), 400

    combined = combine_tasks(tasks, selected_ids)
    if not html_content or not combined.strip():
        return jsonify({'error': 'Current HTML and at least one selected task are required'}), 400

    refined = run_refinement(html_content, combined)
    return jsonify({'success': True, 'request': combined, 'refinedHtmlContent': refined})


@bp.route('/suggest', methods=['POST'])
def suggest():
    data = get_payload()
    html_content = data.get('htmlContent', '')
    if not html_content:
        return jsonify({'error': 'Current HTML is required'}), 400

    tasks = asyncio.run(suggest_improvements(get_model_client(), html_content))
    return jsonify({'success': True, 'tasks': [t.to_json() for t in tasks]})


@bp.route('/content', methods=['POST'])
def content():
    data = get_payload()
    section_type = (data.get('sectionType') or '').strip()
    short_description = (data.get('shortDescription') or '').strip()
    if not section_type or not short_description:
        return jsonify({'error': 'Section type and description are required'}), 400

    result = asyncio.run(generate_section_content(
        get_model_client(), section_type, short_description, data.get('keywords') or None
    ))
    return jsonify({'success': True, 'title': result.title, 'content': result.content})


@bp.route('/seo', methods=['POST'])
def seo():
    data = get_payload()
    page_content = (data.get('content') or '').strip()
    if not page_content:
        return jsonify({'error': 'Content is required'}), 400

    result = asyncio.run(optimize_for_seo(get_model_client(), page_content, data.get('focusKeyword') or None))
    return jsonify({
        'success': True,
        'title': result.title,
        'metaDescription': result.meta_description,
        'keywords': result.keywords,
        'contentSuggestions': result.content_suggestions,
    })


@bp.route('/guidance', methods=['POST'])
def guidance():
    data = get_payload()
    description = (data.get('websiteDescription') or '').strip()
    current_state = (data.get('currentWebsiteState') or '').strip()
    if not description or not current_state:
        return jsonify({'error': 'Website description and current state are required'}), 400

    result = asyncio.run(get_site_creation_guidance(get_model_client(), description, current_state))
    return jsonify({'success': True, 'guidance': result.guidance})


app = create_app()

if __name__ == '__main__':
    logging.basicConfig(
        level=app.config["GENERATOR_SETTINGS"].log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.run(debug=True)
