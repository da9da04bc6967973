# medtracker/agent/graph.py
from langgraph.checkpoint.memory import InMemorySaver
from langgraph.graph import START, END, StateGraph

from medtracker.agent.state import ChatState
from medtracker.agent.nodes import extract_node, merge_node, respond_node

builder = StateGraph(ChatState)

builder.add_node("extract", extract_node)
builder.add_node("merge", merge_node)
builder.add_node("respond", respond_node)

builder.add_edge(START, "extract")
builder.add_edge("extract", "merge")
builder.add_edge("merge", "respond")
builder.add_edge("respond", END)

# session memory only: state is gone when the process exits
memory = InMemorySaver()

chat_graph = builder.compile(checkpointer=memory)
