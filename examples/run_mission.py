from metacog import MetacogApp, MissionConfig
from metacog.mission.scheduler import SchedulerState

import logging
import time

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

# --------------------------------
# Mission configuration
# --------------------------------

# OpenAI by default (needs OPENAI_API_KEY). For local models:
#   METACOG_LLM_BACKEND=ollama METACOG_EMBEDDING_BACKEND=ollama
config = MissionConfig.from_env()

# --------------------------------
# Assemble
# --------------------------------

scheduler = MetacogApp.create(config=config)

if scheduler.resume_from_snapshot():
    print(f"Resumed saved mission at cycle {scheduler.context.cycle}")

# --------------------------------
# Run until a proof, a failure, or Ctrl+C
# --------------------------------

print("\n=== Mission Start ===\n")

scheduler.start()

try:
    while scheduler.state is SchedulerState.RUNNING:
        time.sleep(5)
except KeyboardInterrupt:
    scheduler.stop()

print("\n=== Mission End ===\n")

# --------------------------------
# Inspect state
# --------------------------------

status = scheduler.status()
print(f"State={status['state']}, Cycle={status['cycle']}, Nodes={status['node_count']}")

if status["last_error"]:
    print(f"Halted: {status['last_error']}")

if status["final_proof"]:
    print("--- Final Proof ---")
    print(status["final_proof"])

print("--- Knowledge Graph ---")
for record in scheduler.context.graph.to_records():
    flag = " (invalidated)" if record["invalidated"] else ""
    print(f"[{record['id']}] {record['type']}{flag}: {record['content'][:100]}")
