"""Unit tests for the tool-calling conversation loop."""

from __future__ import annotations

import json
from typing import Any, Dict, List

import openai
import pytest
from pydantic import BaseModel

from openserv_agent.agent_core.errors import (
    CollaboratorError,
    ConfigurationError,
    EmptyResponseError,
    MaxIterationsExceededError,
)
from openserv_agent.agent_core.runtime.conversation import ConversationLoop

pytestmark = pytest.mark.asyncio


class _FailArgs(BaseModel):
    reason: str


async def test_plain_answer_returns_after_one_completion(agent, openai_client, make_completion):
    final = make_completion(content="Hello there")
    openai_client.chat.completions.create.side_effect = [final]

    result = await agent.process([{"role": "user", "content": "Hi"}])

    assert result is final
    assert openai_client.chat.completions.create.await_count == 1
    request = openai_client.chat.completions.create.await_args.kwargs
    assert request["model"] == "gpt-4o"
    assert request["messages"] == [{"role": "user", "content": "Hi"}]
    assert request["tools"][0]["function"]["name"] == "echo"


async def test_tool_round_appends_assistant_and_tool_messages(agent, openai_client, make_completion):
    openai_client.chat.completions.create.side_effect = [
        make_completion(tool_calls=[{"id": "call_1", "name": "echo", "arguments": '{"input": "ping"}'}]),
        make_completion(content="done"),
    ]

    result = await agent.process([{"role": "user", "content": "Echo ping"}])

    assert result.choices[0].message.content == "done"
    assert openai_client.chat.completions.create.await_count == 2
    second_messages = openai_client.chat.completions.create.await_args_list[1].kwargs["messages"]
    assert len(second_messages) == 3
    assert second_messages[1]["role"] == "assistant"
    assert second_messages[1]["tool_calls"][0]["id"] == "call_1"
    assert second_messages[2] == {"role": "tool", "tool_call_id": "call_1", "content": json.dumps("ping")}


async def test_sequential_tool_rounds_grow_conversation_per_round(agent, openai_client, make_completion):
    completions = [
        make_completion(tool_calls=[{"id": "call_1", "name": "echo", "arguments": '{"input": "one"}'}]),
        make_completion(
            tool_calls=[
                {"id": "call_2", "name": "echo", "arguments": '{"input": "two"}'},
                {"id": "call_3", "name": "echo", "arguments": '{"input": "three"}'},
            ]
        ),
        make_completion(content="done"),
    ]
    sent_lengths: List[int] = []

    def respond(**request: Any):
        # The loop keeps appending to the list it sent, so record its size at call time
        sent_lengths.append(len(request["messages"]))
        return completions[len(sent_lengths) - 1]

    openai_client.chat.completions.create.side_effect = respond

    result = await agent.process([{"role": "user", "content": "Echo three words"}])

    assert result.choices[0].message.content == "done"
    assert openai_client.chat.completions.create.await_count == 3
    assert sent_lengths == [1, 3, 6]
    final_messages = openai_client.chat.completions.create.await_args.kwargs["messages"]
    assert [m["role"] for m in final_messages] == ["user", "assistant", "tool", "assistant", "tool", "tool"]
    assert [m["tool_call_id"] for m in final_messages if m["role"] == "tool"] == ["call_1", "call_2", "call_3"]
    assert [json.loads(m["content"]) for m in final_messages[4:]] == ["two", "three"]


async def test_failing_tool_call_does_not_abort_siblings(agent, openai_client, make_completion, errors_seen):
    def fail(ctx):
        raise RuntimeError(f"cannot: {ctx.args.reason}")

    agent.add_capability(name="fail", description="Always fails", schema=_FailArgs, run=fail)
    openai_client.chat.completions.create.side_effect = [
        make_completion(
            tool_calls=[
                {"id": "call_a", "name": "echo", "arguments": '{"input": "a"}'},
                {"id": "call_b", "name": "fail", "arguments": '{"reason": "b"}'},
                {"id": "call_c", "name": "echo", "arguments": '{"input": "c"}'},
            ]
        ),
        make_completion(content="finished"),
    ]

    await agent.process([{"role": "user", "content": "go"}])

    tool_messages = openai_client.chat.completions.create.await_args_list[1].kwargs["messages"][2:]
    assert [m["tool_call_id"] for m in tool_messages] == ["call_a", "call_b", "call_c"]
    assert json.loads(tool_messages[0]["content"]) == "a"
    assert json.loads(tool_messages[1]["content"]) == {"error": "cannot: b"}
    assert json.loads(tool_messages[2]["content"]) == "c"
    assert [e["context"] for e in errors_seen] == ["tool_execution"]
    assert errors_seen[0]["tool_name"] == "fail"


async def test_invalid_tool_arguments_become_error_message(agent, openai_client, make_completion, errors_seen):
    openai_client.chat.completions.create.side_effect = [
        make_completion(
            tool_calls=[
                {"id": "call_1", "name": "echo", "arguments": '{"input": 5}'},
                {"id": "call_2", "name": "echo", "arguments": "{not json"},
                {"id": "call_3", "name": "nope", "arguments": "{}"},
            ]
        ),
        make_completion(content="ok"),
    ]

    await agent.process([{"role": "user", "content": "go"}])

    tool_messages = openai_client.chat.completions.create.await_args_list[1].kwargs["messages"][2:]
    assert json.loads(tool_messages[0]["content"]) == {"error": "input: Expected string, received number"}
    assert "error" in json.loads(tool_messages[1]["content"])
    assert json.loads(tool_messages[2]["content"]) == {"error": 'Tool "nope" not found'}
    assert [e["context"] for e in errors_seen] == ["tool_execution"] * 3


async def test_tools_see_conversation_so_far(agent, openai_client, make_completion):
    seen_messages: List[List[Dict[str, Any]]] = []

    class _Args(BaseModel):
        pass

    def record(ctx):
        seen_messages.append(ctx.messages)
        return "recorded"

    agent.add_capability(name="record", description="Record messages", schema=_Args, run=record)
    openai_client.chat.completions.create.side_effect = [
        make_completion(tool_calls=[{"id": "call_1", "name": "record", "arguments": ""}]),
        make_completion(content="ok"),
    ]

    await agent.process([{"role": "system", "content": "sys"}, {"role": "user", "content": "go"}])

    assert seen_messages == [[{"role": "system", "content": "sys"}, {"role": "user", "content": "go"}]]


async def test_max_iterations_raises_after_ten_completions(agent, openai_client, make_completion, errors_seen):
    openai_client.chat.completions.create.side_effect = [
        make_completion(tool_calls=[{"id": f"call_{i}", "name": "echo", "arguments": '{"input": "x"}'}])
        for i in range(ConversationLoop.MAX_ITERATIONS)
    ]

    with pytest.raises(MaxIterationsExceededError, match=r"Max iterations \(10\)"):
        await agent.process([{"role": "user", "content": "loop"}])

    assert openai_client.chat.completions.create.await_count == 10
    assert [e["context"] for e in errors_seen] == ["process"]


async def test_empty_choices_raise(agent, openai_client, make_completion, errors_seen):
    completion = make_completion(content="x")
    completion.choices = []
    openai_client.chat.completions.create.side_effect = [completion]

    with pytest.raises(EmptyResponseError, match="No response from OpenAI"):
        await agent.process([{"role": "user", "content": "Hi"}])

    assert [e["context"] for e in errors_seen] == ["process"]


async def test_completion_failure_is_collaborator_error(agent, openai_client, errors_seen):
    openai_client.chat.completions.create.side_effect = openai.OpenAIError("upstream down")

    with pytest.raises(CollaboratorError, match="upstream down"):
        await agent.process([{"role": "user", "content": "Hi"}])

    assert len(errors_seen) == 1
    assert errors_seen[0]["context"] == "process"


async def test_no_tools_registered_omits_tools_parameter(settings, openai_client, make_completion):
    from openserv_agent.agent_core.agent import Agent

    bare = Agent(system_prompt="bare", settings=settings, openai_client=openai_client)
    openai_client.chat.completions.create.side_effect = [make_completion(content="hi")]

    await bare.process([{"role": "user", "content": "Hi"}])

    assert "tools" not in openai_client.chat.completions.create.await_args.kwargs


async def test_missing_openai_credential_fails(settings, errors_seen):
    from openserv_agent.agent_core.agent import Agent

    no_key = settings.model_copy(update={"openai_api_key": None})
    bare = Agent(
        system_prompt="bare",
        settings=no_key,
        on_error=lambda err, ctx: errors_seen.append({"error": err, **ctx}),
    )

    with pytest.raises(ConfigurationError, match="OpenAI API key is required"):
        await bare.process([{"role": "user", "content": "Hi"}])

    assert [e["context"] for e in errors_seen] == ["process"]
