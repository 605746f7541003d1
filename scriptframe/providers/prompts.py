"""
Instruction text and response schema sent to the Gemini text model.
"""

from typing import Optional

from google.genai import types


PROMPT_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "prompts": types.Schema(
            type=types.Type.ARRAY,
            items=types.Schema(
                type=types.Type.STRING,
                description=(
                    "A single, descriptive prompt for generating an image "
                    "based on a scene from the script."
                ),
            ),
        ),
    },
    required=["prompts"],
)

STYLE_ANALYSIS_INSTRUCTION = (
    "Analyze the artistic style of this image. Describe the style in a concise, "
    "comma-separated list of keywords and phrases suitable for a text-to-image AI. "
    "Focus on elements like lighting, color palette, composition, medium "
    "(e.g., photograph, oil painting), and overall mood. Do not use full sentences. "
    "Example: cinematic, dramatic lighting, high contrast, muted color palette, "
    "photorealistic, shallow depth of field, moody atmosphere."
)

_EXAMPLE_RESPONSE = """{
  "prompts": [
    "A lone astronaut stands on a desolate red planet, facing a swirling dust storm under a dim sun. Cinematic lighting casts long, dramatic shadows. The style is reminiscent of Denis Villeneuve's 'Dune'.",
    "Extreme close-up on the astronaut's cracked helmet visor. The glass reflects a tiny, distant blue Earth, a stark contrast to the harsh alien landscape. The image is hyperrealistic, with visible dust particles floating in the foreground."
  ]
}"""


def build_prompt_request(
    script: str, style: str, niche: Optional[str], num_prompts: int
) -> str:
    """
    Render the full instruction asking Gemini to break a script into prompts.

    Args:
        script: Narrative script to visualize
        style: Visual style every prompt must follow
        niche: Storytelling topic; the niche line is left out when empty
        num_prompts: Minimum number of prompts to ask for

    Returns:
        Instruction text, also returned to callers for auditing
    """
    niche_line = f"- **Storytelling Topic/Niche:** {niche}\n" if niche else ""

    return (
        "System Instruction: You are an expert script analyst and creative director. "
        "Your job is to read a script, break it down into key visual moments, and "
        "generate safe, detailed prompts for a text-to-image AI.\n"
        "\n"
        "User Request:\n"
        "I have a script that needs to be visualized. Please generate a series of "
        "image prompts based on it.\n"
        "\n"
        "**Context & Style:**\n"
        f"{niche_line}"
        f"- **Visual Style:** {style}\n"
        "\n"
        "**CRITICAL INSTRUCTIONS:**\n"
        "1.  **Analyze and Breakdown:** Read the script and divide it into logical "
        "scenes or distinct visual moments.\n"
        f"2.  **Quantity and Generation:** You MUST generate at least {num_prompts} "
        "unique and detailed prompts in total. If the script has fewer distinct visual "
        "moments than this number, create multiple, distinct creative variations for "
        "the most important scenes to meet this minimum requirement.\n"
        "3.  **Adherence to Style:** Each prompt MUST be detailed and strictly adhere "
        "to the provided **Visual Style** and incorporate the **Storytelling "
        "Topic/Niche** (if provided).\n"
        "4.  **IMPORTANT SAFETY RULE:** You MUST generate prompts that are safe and "
        "appropriate for a general audience. Do not describe or imply violence, "
        "explicit situations, or sensitive interactions, especially those involving "
        "minors, even if historically accurate. If the script contains such themes, "
        "you MUST represent them abstractly or symbolically. Focus on setting, "
        "atmosphere, and emotion. For example, to show tension, describe \"long, "
        "distorted shadows in a dimly lit room\" instead of a direct confrontation. "
        "Failure to follow this rule will result in an invalid response.\n"
        "5.  **Output Format:** Your entire response MUST be a valid JSON object with "
        "a single key \"prompts\", which is an array of strings. Each string in the "
        "array is a single image prompt. Do not add any commentary, explanations, or "
        "markdown formatting around the JSON.\n"
        "\n"
        "**Example Response:**\n"
        f"{_EXAMPLE_RESPONSE}\n"
        "\n"
        "**SCRIPT TO ANALYZE:**\n"
        "---\n"
        f"{script}\n"
        "---\n"
    )
