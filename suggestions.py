import logging
from typing import Iterable, List

from langchain_core.prompts import PromptTemplate
from pydantic import BaseModel, Field

from errors import ProviderUnavailable, SuggestionFailure
from model_client import ModelClient
from placeholders import strip_inline_images

logger = logging.getLogger(__name__)


class Task(BaseModel):
    id: str = Field(description="A unique identifier for the task, e.g., 'task-1'.")
    description: str = Field(description="A clear, concise description of the task to be performed.")
    is_completed: bool = Field(description="Whether the task has been addressed in the HTML already.")

    def to_json(self) -> dict:
        return {"id": self.id, "description": self.description, "isCompleted": self.is_completed}


class TaskList(BaseModel):
    tasks: List[Task] = Field(description="A list of actionable tasks to improve and complete the website.")


suggest_prompt = PromptTemplate.from_template(
    """You are an expert web developer and project manager AI. Your task is to analyze the provided HTML code for a single-page website and identify what is missing or incomplete.

Based on your analysis, create a list of actionable tasks to make the website complete, professional, and fully functional.

Here's what to look for:
- Incomplete Sections: Are there sections mentioned in the navigation (e.g., "Services", "About Us", "Contact") that are empty or have very little content?
- Missing Functionality: Does the contact section have a form? Are there calls-to-action that don't lead anywhere?
- Content Gaps: Is the content generic? Suggest tasks to add specific details relevant to the business type. For example, instead of just "Our Services", suggest "Add 3 detailed service descriptions with icons".
- Design Enhancements: Suggest tasks for adding more visual elements, like a photo gallery or customer testimonials section, if appropriate.

For each identified issue, create a clear, actionable task. For example:
- "Flesh out the 'Services' section with details for at least three distinct services."
- "Add a functional contact form with 'Name', 'Email', and 'Message' fields to the 'Contact Us' section."
- "Create a 'Testimonials' section with 2-3 sample customer reviews."

Images have been replaced with src="image-placeholder" to keep the document short; treat them as real images.

Analyze the following HTML and generate your task list. Set 'is_completed' to true only if the task is already fully addressed in the provided HTML. Otherwise, set it to false.

Current HTML:
```html
{html_content}
```
"""
)


async def suggest_improvements(client: ModelClient, html_content: str) -> List[Task]:
    """Return the outstanding improvement tasks for a page, in model order."""
    prompt = suggest_prompt.format(html_content=strip_inline_images(html_content))
    try:
        output = await client.generate_text(prompt, TaskList)
    except ProviderUnavailable:
        raise
    except Exception as e:
        raise SuggestionFailure(f"Could not generate suggestions: {e}") from e
    if output is None:
        raise SuggestionFailure("Could not generate suggestions.")

    outstanding = [task for task in output.tasks if not task.is_completed]
    logger.info("Model suggested %d tasks, %d outstanding", len(output.tasks), len(outstanding))
    return outstanding


def combine_tasks(tasks: Iterable[Task], selected_ids: Iterable[str]) -> str:
    """Join the selected task descriptions into a single refinement request."""
    selected = set(selected_ids)
    return ". ".join(task.description for task in tasks if task.id in selected)
