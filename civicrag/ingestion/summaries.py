"""
Summary generation for bills and parliamentary proceedings.

Only the first ``summary_input_chars`` characters of the document are sent
to the model.
"""

import logging
from typing import Optional

from ..agent.llm_config import LLMClient, get_llm_client, response_text
from ..agent.prompts import BILL_SUMMARY_PROMPT, PROCEEDING_SUMMARY_PROMPT
from ..models.document import DocumentType
from ..rag.config import RAGConfig
from ..rag.exceptions import DerivedRecordError

logger = logging.getLogger(__name__)

SUMMARY_FAILED_PLACEHOLDER = "Summary generation failed."

# (instruction, max_tokens, user prefix) per document type
SUMMARY_SETTINGS = {
    DocumentType.BILL: (BILL_SUMMARY_PROMPT, 500, "Please summarize this bill:\n\n"),
    DocumentType.PARLIAMENTARY_BULLETIN: (
        PROCEEDING_SUMMARY_PROMPT,
        800,
        "Please summarize this parliamentary bulletin:\n\n",
    ),
}
SUMMARY_TEMPERATURE = 0.3


class SummaryGenerator:
    """Generates the derived summary text for bills and bulletins."""

    def __init__(self, config: RAGConfig, llm_client: Optional[LLMClient] = None):
        self.config = config
        self.llm_client = llm_client or get_llm_client()

    def summarize(self, text: str, document_type: DocumentType) -> str:
        """
        Summarize document text.

        Args:
            text: Full document text
            document_type: BILL or PARLIAMENTARY_BULLETIN

        Returns:
            Summary text

        Raises:
            DerivedRecordError: If the type has no summary or the model call fails
        """
        document_type = DocumentType(document_type)
        if document_type not in SUMMARY_SETTINGS:
            raise DerivedRecordError(f"No summary is generated for '{document_type.value}' documents")

        instruction, max_tokens, prefix = SUMMARY_SETTINGS[document_type]
        try:
            response = self.llm_client.complete(
                messages=[
                    {"role": "system", "content": instruction},
                    {"role": "user", "content": prefix + text[:self.config.summary_input_chars]},
                ],
                model=self.config.summary_model,
                max_tokens=max_tokens,
                temperature=SUMMARY_TEMPERATURE,
            )
            summary = response_text(response)
        except Exception as e:
            raise DerivedRecordError(f"Summary generation failed: {e}") from e

        if not summary:
            raise DerivedRecordError("Summary model returned no text")

        logger.info(f"Generated {document_type.value} summary ({len(summary)} characters)")
        return summary
