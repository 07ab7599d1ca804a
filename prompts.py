"""
LLM Prompts for the Paper Digestion Pipeline

This module contains all prompts sent to the inference backend.
All prompts are centrally managed here for consistency and maintainability.
"""


# ===== EXTRACTION PROMPTS (Used by PageExtractor) =====

# Page Extraction Prompt - one rasterized page of a research paper
PAGE_EXTRACTION_PROMPT = """Process this research paper page image and convert it to markdown.

1. Metadata (if present on this page):
   - Title
   - Author names
   - Publication/Creation date

2. Main content:
   - Convert all text to markdown
   - If the page uses a two-column layout, merge it into a single-column flow
   - Preserve the logical reading order of sections
   - Keep all equations, formulas and mathematical expressions
   - Write equations in LaTeX with double dollar signs, e.g. $$E=mc^2$$
   - Keep lengthy content such as theorems and propositions in full
   - Keep section headings and subheadings
   - Preserve all citations and references

3. Figures and tables:
   - Detect every figure, diagram and table
   - Create a placeholder URL for each one
   - Write a descriptive caption for each one
   - Insert it at its original position in the text flow
   - Format as: ![Description](placeholder_url)

4. Output order:
   - Metadata first (title, authors, date)
   - Main content in sequential order
   - References section at the end, if present on this page
   - Plain markdown with LaTeX equations, no complex layouts

5. Cleanup:
   - Remove page numbers
   - Remove running headers and footers
   - Remove journal/conference formatting elements
   - Keep only research-relevant content

Return the title, authors, creation date and the markdown content.
Use empty values for metadata that does not appear on this page."""


# ===== REVIEW PROMPTS (Used by ReviewSynthesizer) =====

# Review Generation Prompt - sent before the per-paper messages
REVIEW_PAPER_PROMPT = """You are writing a review paper that synthesizes the research papers provided in the following messages.
Each following message holds one paper: its title, then its full markdown content.

Requirements:
1. Synthesis:
   - Organize the review by themes, not paper by paper
   - Identify shared research questions, agreements and contradictions
   - Point out open problems and directions for future work

2. Methodology comparison:
   - Compare the methods, datasets and evaluation setups of the papers
   - State the strengths and limitations of each approach

3. Citations:
   - Cite papers inline with numbered citations, e.g. [1], [2]
   - Number papers in order of first citation
   - The references list must follow the same numbering, one entry per citation

4. Formatting:
   - Write the content in markdown with headings for each section
   - Write equations in LaTeX with double dollar signs, e.g. $$E=mc^2$$
   - Start with an abstract and end with a conclusion

Return the review title, the markdown content and the ordered references list."""


def get_paper_message(title: str, content: str) -> str:
    """
    Create the message carrying one assembled paper

    Args:
        title: Paper title captured from its first page
        content: Full markdown content of the paper

    Returns:
        Message text for the review request
    """
    return f"""Title: {title}

{content}"""
