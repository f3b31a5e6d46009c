from typing import Any, Dict

from flask import current_app

from services.ai_gateway import call_chat_text, get_openai_client, transcribe_audio


FORMAT_SYSTEM_PROMPT = """You are an intelligent text formatting assistant. Your task is to analyze the input text and apply appropriate formatting based on its content type.

FIRST, DETECT THE CONTENT TYPE:

A) TECHNICAL/MATHEMATICAL CONTENT (contains LaTeX, math expressions, code):
   - Convert LaTeX math delimiters:
     * (expression) or \\(expression\\) -> $expression$
     * [expression] or \\[expression\\] -> $$expression$$
     * Standalone math expressions -> wrap with $ or $$
   - Fix common LaTeX issues:
     * \\Bbb F -> \\mathbb{F}
     * Ensure all math is properly wrapped in $ or $$
   - Preserve technical accuracy
   - Format mathematical proofs with clear structure

B) GENERAL DOCUMENT TEXT (regular writing, notes, essays):
   - Create clear hierarchy:
     * Identify main topics -> ## Heading
     * Identify subtopics -> ### Subheading
     * Identify supporting points -> bullet points or numbered lists
   - Improve readability:
     * Break long paragraphs into smaller ones
     * Add horizontal rules (---) between major sections
     * Create lists for sequential or related items
   - Organize scattered thoughts into coherent sections
   - Add emphasis (**bold** for key terms, *italic* for definitions)

UNIVERSAL RULES:
1. DO NOT change the actual content, facts, or meaning
2. DO NOT add new information or explanations
3. Return ONLY the formatted text
4. Preserve the original intent and tone
5. Make the text scannable and easy to read
6. Use consistent formatting throughout"""

SUMMARY_SYSTEM_PROMPT = """You are an intelligent audio summarization assistant. Your task is to create a comprehensive yet concise summary of audio recordings.

GUIDELINES FOR SUMMARY:
1. **Main Points**: Extract and organize the key ideas and topics discussed
2. **Action Items**: Identify any tasks, todos, or action items mentioned
3. **Key Insights**: Highlight important conclusions, decisions, or insights
4. **Context**: Provide relevant context when needed for clarity
5. **Structure**: Use clear headings and bullet points for readability

FORMAT:
- Start with a brief overview (1-2 sentences)
- Use markdown formatting for structure
- Keep the summary focused and actionable
- Highlight the most important information
- If the audio is very short or unclear, provide what information is available

TONE:
- Professional yet conversational
- Clear and direct
- Focus on value and actionability"""

FORMAT_MAX_TOKENS = 4000
SUMMARY_MAX_TOKENS = 2000
SUMMARY_FALLBACK = "Unable to generate summary"


def transcribe(audio) -> Dict[str, Any]:
    """Transcribe one uploaded recording."""
    client = get_openai_client()
    text = transcribe_audio(
        client,
        audio,
        model=current_app.config["OPENAI_TRANSCRIBE_MODEL"],
        language="en",
        fallback="Failed to transcribe audio",
    )
    return {"text": text}


def format_text(text: str) -> Dict[str, Any]:
    """Restructure free text as markdown without changing its content."""
    client = get_openai_client()
    formatted = call_chat_text(
        client,
        FORMAT_SYSTEM_PROMPT,
        text,
        model=current_app.config["OPENAI_TEXT_MODEL"],
        max_completion_tokens=FORMAT_MAX_TOKENS,
        fallback="Failed to format text",
    )
    return {"formattedText": formatted or text}


def summarize_recording(audio) -> Dict[str, Any]:
    """Transcribe a recording, then summarize the transcript in a second call."""
    client = get_openai_client()
    transcript = transcribe_audio(
        client,
        audio,
        model=current_app.config["OPENAI_SUMMARY_TRANSCRIBE_MODEL"],
        response_format="text",
        fallback="Failed to transcribe audio",
        sanitize=False,
    )
    summary = call_chat_text(
        client,
        SUMMARY_SYSTEM_PROMPT,
        f"Please provide a detailed summary of this recording transcript:\n\n{transcript}",
        model=current_app.config["OPENAI_TEXT_MODEL"],
        max_completion_tokens=SUMMARY_MAX_TOKENS,
        fallback="Failed to generate summary",
        sanitize=False,
    )
    return {"transcript": transcript, "summary": summary or SUMMARY_FALLBACK}
