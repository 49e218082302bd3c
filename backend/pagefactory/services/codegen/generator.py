import os
from jinja2 import Environment, FileSystemLoader
from pagefactory.core.errors import GenerationFailed
from pagefactory.core.logging import get_logger
from pagefactory.services.codegen import sanitizer

logger = get_logger("code_generator")


class CodeGenerator:
    def __init__(self, llm):
        self.llm = llm
        template_dir = os.path.join(os.path.dirname(__file__), 'templates')
        self.env = Environment(loader=FileSystemLoader(template_dir), keep_trailing_newline=True)

    def build_prompt(self, prompt: str) -> str:
        template = self.env.get_template('landing_page_prompt.txt.j2')
        return template.render(
            prompt=prompt,
            component_name=sanitizer.COMPONENT_NAME,
            export_line=sanitizer.REQUIRED_EXPORT,
            curves={
                "ease_out": sanitizer.EASE_OUT,
                "ease_in": sanitizer.EASE_IN,
                "ease_in_out": sanitizer.EASE_IN_OUT,
            },
        )

    async def generate(self, prompt: str) -> str:
        """Ask the model for the page component and return the repaired source."""
        messages = [{"role": "user", "content": self.build_prompt(prompt)}]
        try:
            raw = await self.llm.achat_completion(messages)
        except Exception as e:
            raise GenerationFailed(f"AI generation failed: {e}") from e

        if not isinstance(raw, str) or not raw.strip():
            raise GenerationFailed("AI generation failed: empty response from model")

        logger.info(f"Model returned {len(raw)} chars")
        return sanitizer.sanitize_component(raw)
