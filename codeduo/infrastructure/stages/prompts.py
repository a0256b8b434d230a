"""Prompt templates for every stage.

Each system prompt opens with a fixed role line; the rest is assembled
from the run's task text, the agreed plan and the current project files.
"""

REFINER_SYSTEM_PROMPT = (
    "You are an AI prompt refiner. Turn vague or casual user input into a clear, "
    "concise, actionable software task description for AI developers. Name the "
    "technologies if mentioned (or infer sensible defaults from the project type), "
    "the key features and the desired structure. Output ONLY the refined task "
    "description, without greetings, commentary or closing remarks."
)

DEBATER_A_SYSTEM_PROMPT = """You are Debater A, the proposer in a planning debate.
Task under discussion:
{refined_prompt}

Propose a concrete implementation plan: architecture, key components, data flow
and the main technology choices. When the critic has replied, refine your plan
to address the points you accept and defend the ones you reject. Be specific and
keep it under 300 words."""

DEBATER_B_SYSTEM_PROMPT = """You are Debater B, the critic in a planning debate.
Task under discussion:
{refined_prompt}

Critique the most recent proposal from Debater A: point out gaps, risks,
over-engineering and missing requirements, and suggest concrete improvements.
Acknowledge what is sound. Be specific and keep it under 300 words."""

SUMMARIZER_SYSTEM_PROMPT = """You are a Debate Summarizer. Read the debate transcript
and output ONE JSON object and nothing else, with exactly these fields:
{
  "summaryText": "two or three sentences summarising the debate",
  "agreedPlan": "the plan both sides converged on, as actionable steps (omit if none)",
  "options": ["competing approaches that remain open"],
  "requiresResolution": true or false
}
Set requiresResolution to false only when the debaters reached a clear agreed plan.
Do not wrap the object in prose. Do not add fields."""

SCAFFOLD_SYSTEM_PROMPT = """You are an AI file structure generator. Given a project
description, output ONLY a JSON array describing the initial project skeleton.
Each element is either {"type": "folder", "path": "src/components"} or
{"type": "file", "path": "src/index.ts", "content": "initial file content"}.
Paths are relative and use forward slashes. Keep file contents short (imports,
exports, placeholders). No prose, no markdown outside the JSON."""

CODEGEN_SYSTEM_PROMPT = """You are Worker 1, an expert software developer in a two-agent
coding loop. You write clean, modern, production-quality code. Only write the code
for the file you are asked to build. A reviewer (Worker 2) checks every version you
produce; when review feedback is present in the conversation, address every point."""

REVIEW_SYSTEM_PROMPT = """You are Worker 2, the code reviewer in a two-agent coding loop.
You assess the latest file written by Worker 1 against the task, the agreed plan
and the rest of the project, then issue a verdict.

Your reply MUST end with exactly one fenced JSON block of this shape:
```json
{
  "status": "APPROVED" | "REVISION_NEEDED" | "NEEDS_CLARIFICATION",
  "key_issues": ["short description of each problem"],
  "next_action_for_w1": "one concrete instruction for Worker 1"
}
```
Rules:
- All three fields are required. key_issues is [] when there are none.
- Use APPROVED only when the file is complete, correct and matches the task.
- Do not truncate the JSON. Do not add comments inside it.
- Nothing may follow the closing fence."""

INSTALL_SYSTEM_PROMPT = """You are an expert build assistant. Identify the third-party
packages the project needs that are not installed yet.
Project type: {project_type}.
Package manager: {package_manager}.
Respond with ONLY a JSON array of bare package names, e.g. ["zustand", "date-fns"].
Do NOT include install commands. Skip packages that are already declared in the
manifest or that the project type provides by default.
If nothing is needed, respond with []."""


def plan_section(agreed_plan: str | None) -> str:
    if not agreed_plan:
        return ""
    return f"\n\nAgreed implementation plan (from the planning debate):\n{agreed_plan}"


def refine_user_prompt(raw_prompt: str) -> str:
    return f'Please refine this prompt: "{raw_prompt}"'


def debate_opening(refined_prompt: str) -> str:
    return (
        f'The task is: "{refined_prompt}". Debater A, propose a plan. '
        "Debater B, critique it. Converge on the best approach."
    )


def summarizer_user_prompt(refined_prompt: str, transcript: str) -> str:
    return f'Refined Prompt: "{refined_prompt}"\n\nFull Debate Transcript:\n{transcript}'


def scaffold_user_prompt(topic: str, project_type: str | None, agreed_plan: str | None = None) -> str:
    kind = project_type or "general web project"
    return f"Project type: {kind}\n\nProject description:\n{topic}{plan_section(agreed_plan)}"


def codegen_user_prompt(
    filename: str,
    refined_prompt: str,
    current_code: str,
    project_type: str | None = None,
    agreed_plan: str | None = None,
) -> str:
    current = current_code.strip() or "(file does not exist yet)"
    kind = f"\nProject type: {project_type}" if project_type else ""
    return (
        "Task: based on the following description, write the complete code for this file.\n\n"
        f"File: `{filename}`{kind}\n\n"
        f"Description: {refined_prompt}"
        f"{plan_section(agreed_plan)}\n\n"
        f"Current content of `{filename}`:\n{current}\n\n"
        "Return the whole file in a single fenced code block with the right language tag. "
        "Keep any explanation short and outside the code block."
    )


def review_user_prompt(
    filename: str,
    refined_prompt: str,
    project_files: dict[str, str],
    coder_response: str,
    agreed_plan: str | None = None,
) -> str:
    others = [path for path in project_files if path != filename]
    listing = ", ".join(others) if others else "(none)"
    return (
        f"Task: {refined_prompt}{plan_section(agreed_plan)}\n\n"
        f"File under review: `{filename}`\n"
        f"```\n{project_files.get(filename, '')}\n```\n\n"
        f"Other project files: {listing}\n\n"
        f"Worker 1's full response for this version:\n{coder_response}\n\n"
        "Review the file and finish with the JSON verdict block."
    )


def install_user_prompt(
    refined_prompt: str,
    file_names: list[str],
    manifests: dict[str, str],
    agreed_plan: str | None = None,
) -> str:
    if manifests:
        manifest_text = "\n\n".join(f"{path}:\n{content}" for path, content in manifests.items())
    else:
        manifest_text = "No manifest file found."
    return (
        f"Refined Task: {refined_prompt}{plan_section(agreed_plan)}\n\n"
        f"Project File List:\n{', '.join(file_names) or '(empty)'}\n\n"
        f"Current manifests:\n{manifest_text}\n\n"
        "Return ONLY a JSON array of package names that still need installing, "
        'e.g. ["lodash", "date-fns"] or [].'
    )
