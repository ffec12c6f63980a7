"""
Prompt templates for the story writer

Every template asks for JSON (or plain text for single image prompts); the
writer parses replies with the shared JSON extractor.
"""

from dataclasses import dataclass


@dataclass
class PromptTemplate:
    """A prompt template with placeholders"""
    template: str
    description: str = ""

    def format(self, **kwargs) -> str:
        return self.template.format(**kwargs)

    def __str__(self) -> str:
        return f"PromptTemplate({self.description})"


LANGUAGE_RULES = """IMPORTANT LANGUAGE RULES:
- Use simple, clear language that a 10-year-old can understand
- Avoid poetic, flowery, or hyperbolic expressions
- Use short, direct sentences
- Choose common words over fancy or complex vocabulary
- Be conversational and natural, not dramatic or exaggerated"""


# =============================================================================
# METADATA
# =============================================================================

TOPIC_METADATA = PromptTemplate(
    template="""Generate a compelling title, description, and hashtags for a short video about: "{topic}" in {genre} genre. Language: {language}.

Return ONLY a JSON object in this exact format:
{{
  "title": "engaging title here",
  "description": "brief description here",
  "hashtags": "#hashtag1 #hashtag2 #hashtag3"
}}""",
    description="Title, description and hashtags from a topic"
)

PROMPT_METADATA = PromptTemplate(
    template="""Based on this story outline, generate metadata for a short video:

Story Outline: "{prompt}"
Genre: {genre}
Language: {language}

Generate:
1. A catchy title that captures the story essence
2. A compelling description/summary
3. Relevant hashtags
4. A short topic phrase (max {topic_max_length} characters) that summarizes the main theme

Return ONLY a JSON object in this exact format:
{{
  "title": "engaging title here in {language}",
  "description": "brief description here in {language}",
  "hashtags": "#hashtag1 #hashtag2 #hashtag3",
  "suggestedTopic": "short topic phrase"
}}""",
    description="Metadata plus a suggested topic from a story outline"
)

NARRATIONS_METADATA = PromptTemplate(
    template="""Based on these narrations, generate metadata for a short video:

Narrations:
{narrations}

Genre: {genre}
Language: {language}

Generate:
1. A catchy title that captures the story essence
2. A compelling description/summary
3. Relevant hashtags
4. A short topic phrase (max {topic_max_length} characters) that summarizes the main theme

Return ONLY a JSON object in this exact format:
{{
  "title": "engaging title here in {language}",
  "description": "brief description here in {language}",
  "hashtags": "#hashtag1 #hashtag2 #hashtag3",
  "suggestedTopic": "short topic phrase"
}}""",
    description="Metadata plus a suggested topic from caller narrations"
)


# =============================================================================
# NARRATION
# =============================================================================

TOPIC_NARRATIONS = PromptTemplate(
    template="""Create a {content_kind} for a {scene_count}-scene short video about: "{topic}" in {genre} genre{tone}. Language: {language}.

Generate ONLY the narration text for each scene. Make it engaging and suitable for shorts format.

{language_rules}

Return ONLY a JSON array in this exact format:
[
  {{
    "order": 1,
    "narration": "narration text in {language}"
  }}
]

Create exactly {scene_count} narrations.""",
    description="Scene narrations from a topic"
)

PROMPT_NARRATIONS = PromptTemplate(
    template="""Create narrations for a {scene_count}-scene short video based on this outline:

"{prompt}"

Genre: {genre}
Language: {language}
Style:{tone}

Generate ONLY the narration text for each scene. Each narration should be a single paragraph that flows naturally when spoken.

{language_rules}

Return ONLY a JSON array in this exact format:
[
  {{
    "order": 1,
    "narration": "narration text in {language}"
  }}
]

Create exactly {scene_count} narrations that tell the complete {content_kind}.""",
    description="Scene narrations from a free-form outline"
)


# =============================================================================
# IMAGERY
# =============================================================================

CHARACTER_DESCRIPTIONS = PromptTemplate(
    template="""Based on this story topic and narrations, identify and describe ALL characters that appear in the story.

Topic: {topic}

Narrations:
{narrations}

For each character, provide a detailed, consistent visual description{style} that can be used for AI image generation.

Include:
- Physical appearance (age, build, hair, eyes, skin tone)
- Clothing/outfit (be specific and consistent)
- Distinctive features or accessories

Return ONLY a JSON object with character names as keys:
{{
  "Main Character Name": "Detailed visual description for consistent imagery...",
  "Another Character": "Their detailed visual description..."
}}""",
    description="Character sheet for consistent imagery"
)

IMAGE_PROMPTS_BATCH = PromptTemplate(
    template="""Based on these narrations, generate detailed image generation prompts{style}:
{character_context}{previous_context}
{narrations}

For EACH scene listed above, create a prompt in English that includes:
- Main subject/characters
- Setting/environment (consistent with previous scenes in the same location)
- Mood/atmosphere
- Composition

RULES:
1. Return a result for EACH scene with the EXACT order number specified above.
2. Keep character appearances consistent across all scenes.
3. Show characters DOING something related to the narration, not posing for the camera.

Return ONLY a JSON array in this exact format (one entry for EACH scene):
[
  {{
    "order": 1,
    "imagePrompt": "detailed visual description for AI image generation"
  }}
]

Generate exactly {count} results.""",
    description="Image prompts for a batch of scenes with continuity context"
)

IMAGE_PROMPT_SINGLE = PromptTemplate(
    template="""Based on this narration: "{narration}"
{character_context}{previous_context}
Generate a detailed image generation prompt{style} that visually represents this scene.
Describe the subject, setting, mood and composition in English.

Return ONLY the image prompt as plain text, no JSON.""",
    description="Fallback image prompt for one scene"
)


# =============================================================================
# ANIMATION
# =============================================================================

ANIMATION_PLAN = PromptTemplate(
    template="""Based on this narration: "{narration}"

Suggest appropriate Ken Burns style animations for the image in this scene.

Available animation options (you MUST choose from these):

- animationIn (entrance): {transitions}
- animationShow (main movement):
  * {show_options}
- animationOut (exit): {transitions}

Match animation to mood: action=pan/zoom-pan, suspense=zoom-slow, reveal=zoom-out.
Previous scene used: {previous_show}. Do not repeat it.

Return ONLY a JSON object:
{{
  "animationIn": "fade",
  "animationShow": "{first_show}",
  "animationOut": "fade"
}}""",
    description="Entrance/show/exit animation suggestion for one scene"
)
