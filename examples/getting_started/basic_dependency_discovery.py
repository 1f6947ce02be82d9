"""Getting started with afdclean.

This example walks through the main features of the package:
1. Exact dependency discovery on a small table
2. Approximate dependencies and the rows that break them
3. Chunked and sampled runs on a larger table
4. Reports and pandas summaries
"""

import numpy as np
import pandas as pd

from afdclean import (
    AttributeSet,
    CleanerConfig,
    DataFrameRowSource,
    LatticeEngine,
    dependencies_frame,
    discover_dependencies,
    format_report,
    get_logger,
)

# Set up logging
logger = get_logger(__name__)


def create_sample_data():
    """Create an address table with a few typing mistakes."""
    rng = np.random.default_rng(42)
    cities = {
        "Paris": ("FR", "75000"),
        "Lyon": ("FR", "69000"),
        "Rome": ("IT", "00100"),
        "Milan": ("IT", "20100"),
        "Madrid": ("ES", "28001"),
    }
    names = rng.choice(list(cities), 200)
    df = pd.DataFrame(
        {
            "city": names,
            "country": [cities[n][0] for n in names],
            "zip": [cities[n][1] for n in names],
            "segment": rng.choice(["retail", "wholesale"], 200),
        }
    )
    # three rows with the wrong country
    df.loc[[17, 88, 140], "country"] = ["IT", "ES", "FR"]
    return df


def demo_exact_dependencies():
    """Find dependencies that hold without deleting anything."""
    logger.info("\n" + "=" * 60)
    logger.info("1. EXACT DEPENDENCIES")
    logger.info("=" * 60)

    df = create_sample_data()
    result = discover_dependencies(df, epsilon=0)

    logger.info(f"Traversal order: {result.attribute_order}")
    for dep in result.dependencies:
        logger.info(f"  {dep.key}")


def demo_approximate_dependencies():
    """Tolerate a few bad rows and list them."""
    logger.info("\n" + "=" * 60)
    logger.info("2. APPROXIMATE DEPENDENCIES")
    logger.info("=" * 60)

    df = create_sample_data()
    result = discover_dependencies(df, epsilon=0.02)

    city_country = result.dependency("city->country")
    if city_country is not None:
        rows = sorted(city_country.violating_rows)
        logger.info(f"city->country holds after deleting rows {rows}")
        logger.info(f"\n{df.loc[rows]}")

    logger.info("\nSummary:")
    logger.info(f"\n{dependencies_frame(result)}")


def demo_large_table():
    """Compare plain, chunked and sampled runs."""
    logger.info("\n" + "=" * 60)
    logger.info("3. CHUNKED AND SAMPLED RUNS")
    logger.info("=" * 60)

    df = pd.concat([create_sample_data()] * 250, ignore_index=True)
    plain = discover_dependencies(df, epsilon=0.02)
    chunked = discover_dependencies(df, epsilon=0.02, chunk_size=5000)
    sampled = discover_dependencies(df, epsilon=0.02, delta=0.1, sampled=True)

    logger.info(f"Rows: {len(df)}")
    logger.info(f"Plain:   {len(plain.dependencies)} dependencies in {plain.elapsed:.2f}s")
    logger.info(
        f"Chunked: {len(chunked.dependencies)} dependencies in {chunked.elapsed:.2f}s"
    )
    logger.info(
        f"Sampled: {len(sampled.dependencies)} dependencies from "
        f"{sampled.total_rows} rows in {sampled.elapsed:.2f}s"
    )


def demo_engine_and_report():
    """Drive the engine directly and print the text report."""
    logger.info("\n" + "=" * 60)
    logger.info("4. ENGINE AND REPORT")
    logger.info("=" * 60)

    df = create_sample_data()
    config = CleanerConfig(["city", "country", "zip"], epsilon=0.02)
    engine = LatticeEngine(DataFrameRowSource(df), config)
    result = engine.run()

    partition = engine.partition_for(AttributeSet.ordered(["city", "zip"], {
        a: i for i, a in enumerate(result.attribute_order)
    }))
    logger.info(f"Classes of city:zip: {partition.num_classes}")
    logger.info("\n" + format_report(result, table="addresses", config=config))


def main():
    """Run all demonstrations."""
    demo_exact_dependencies()
    demo_approximate_dependencies()
    demo_large_table()
    demo_engine_and_report()


if __name__ == "__main__":
    main()
