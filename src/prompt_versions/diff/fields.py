"""Static classification of prompt snapshot fields."""

from enum import Enum


class DiffStrategy(str, Enum):
    """How a snapshot field is compared."""
    TEXT = "text"
    STRUCTURED = "structured"
    SCALAR = "scalar"


TEXT_FIELDS = frozenset({
    "input_admin_prompt",
    "input_user_prompt",
    "note",
})

STRUCTURED_FIELDS = frozenset({
    "post_action_config",
    "question_config",
    "variable_assignments_config",
    "extracted_variables",
    "system_variables",
})

# Columns of q_prompts captured in a version snapshot, in snapshot order.
VERSIONABLE_FIELDS = (
    # Content
    "prompt_name", "input_admin_prompt", "input_user_prompt", "note",
    # Model configuration
    "model", "model_on", "temperature", "temperature_on",
    "top_p", "top_p_on", "max_tokens", "max_tokens_on",
    "max_output_tokens", "max_output_tokens_on",
    "max_completion_tokens", "max_completion_tokens_on",
    "frequency_penalty", "frequency_penalty_on",
    "presence_penalty", "presence_penalty_on",
    "reasoning_effort", "reasoning_effort_on",
    "response_format", "response_format_on",
    "stop", "stop_on", "seed", "seed_on",
    # Extended model parameters
    "n", "n_on", "logit_bias", "logit_bias_on", "o_user", "o_user_on",
    "stream", "stream_on", "best_of", "best_of_on", "logprobs", "logprobs_on",
    "echo", "echo_on", "suffix", "suffix_on", "context_length", "context_length_on",
    # Node configuration
    "node_type", "post_action", "post_action_config",
    "question_config", "json_schema_template_id",
    "variable_assignments_config", "extracted_variables",
    # Behavior
    "auto_run_children", "exclude_from_cascade", "exclude_from_export",
    "child_thread_strategy", "default_child_thread_strategy",
    "thread_mode", "task_mode",
    # Tools
    "code_interpreter_on", "file_search_on", "web_search_on",
    "confluence_enabled", "tool_choice", "tool_choice_on",
    # Visual and references
    "icon_name", "starred", "is_private", "is_assistant", "is_legacy",
    "system_variables", "template_row_id", "library_prompt_id", "provider_lock",
)


def classify_field(field: str) -> DiffStrategy:
    """Return the diff strategy for a snapshot field name."""
    if field in TEXT_FIELDS:
        return DiffStrategy.TEXT
    if field in STRUCTURED_FIELDS:
        return DiffStrategy.STRUCTURED
    return DiffStrategy.SCALAR
