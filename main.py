import asyncio
import sys
from loguru import logger

from bizmerge.config import INPUT_JSON, OUTPUT_JSON, SUMMARY_JSON, LOG_LEVEL
from bizmerge.matchers.merge_orchestrator import run_deduplication_async
from bizmerge.record_loader import load_records_from_json, write_records_json, write_summary_json


async def main():
    """
    Run the consolidation pipeline once.

    - Loads producer records from the input JSON file.
    - Deduplicates them across sources.
    - Writes the consolidated records and a run summary.
    """
    # Initialize logs
    logger.remove()  # Remove default handler
    logger.add(sys.stderr, level=LOG_LEVEL, format="<green>{time:HH:mm:ss}</green> | <level>{message}</level>")

    all_businesses = load_records_from_json(INPUT_JSON)
    logger.info(f"Total businesses found before deduplication: {len(all_businesses)}")

    if not all_businesses:
        logger.warning(f"No businesses loaded from {INPUT_JSON}, nothing to do")
        return

    final_results, summary = await run_deduplication_async(all_businesses)

    write_records_json(final_results, OUTPUT_JSON)
    write_summary_json(summary, SUMMARY_JSON)
    logger.info(
        f"Stored {summary.output_total} businesses in {OUTPUT_JSON} "
        f"({summary.merged} merged, {summary.unique} unique)"
    )


if __name__ == "__main__":
    asyncio.run(main())
