"""agentloop.

This package coordinates a conversational task-execution loop between a
language-model backend and a set of callable tools.

High-level architecture
-----------------------

A single *run* turns one user input into one final answer:

- A **reasoning engine** (ReAct, Chain-of-Thought, Planner, Reflect,
  Autonomous, or a custom engine) decides, turn by turn, whether to think,
  call a tool, revise, plan, or stop.
- Every tool call goes through one **invocation protocol** that applies the
  tool allow-list, runs ``tool:*`` middleware and events, and records the
  outcome (success or failure) in the run's execution state.
- A **memory provider** decides which conversation history survives into the
  next run of the same session.

Core subpackages
----------------

- ``agentloop.agent_core``:

  - Message / step / plan schemas.
  - Tool registry, policy, middleware pipeline and event bus.
  - Reasoning engines and the engine registry.
  - Memory strategies (buffer, sliding window, summarizing, composite).
  - The ``AgentRuntime`` composition root.

- ``agentloop.core``:

  - Settings and logging configuration.

Typical workflow
----------------

Most integrations should use ``agentloop.agent_core.factory.create_agent``:

1. Create an agent with a model provider and tools.
2. Pick a reasoning strategy (``"react"`` by default).
3. ``await agent.run("...")`` and read ``RunResult.output`` and
   ``RunResult.state.steps``.
"""
