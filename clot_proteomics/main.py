"""
Main entry point for the clot proteomics analysis.

This script provides a command-line interface to run the preprocessing and
exploratory stages of the pipeline.
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from .config.settings import BUNDLE_FILE, RESULTS_DIR
from .data import ProteomicsDataLoader, ProteomicsDataset, save_bundle, load_bundle
from .data.schemas import DegenerateInputError, SchemaError, TableLoadError
from .analysis.preprocessing import (
    ProteinMatrixBuilder, SampleMetadataBuilder, Normalizer, AbundanceFilter
)
from .analysis.exploratory import (
    run_pca, run_umap, MetadataCorrelationAnalyzer, MechanismFeatureImportance,
    top_abundant_proteins, highly_variable_proteins, detection_summary
)
from .utils import ProteomicsVisualizer


def run_preprocessing(loader: Optional[ProteomicsDataLoader] = None,
                      bundle_path: Optional[Path] = None) -> ProteomicsDataset:
    """Build, normalize, filter and save the dataset bundle."""
    print("=== Clot Proteomics Preprocessing ===")

    loader = loader or ProteomicsDataLoader()
    tables = loader.load_all()

    dataset = ProteinMatrixBuilder().build(tables['protein'])

    detection = detection_summary(dataset.abundance)
    print(f"Detected proteins per sample: median {detection['Detected'].median():.0f}, "
          f"min {detection['Detected'].min()}")

    samples = SampleMetadataBuilder().build(
        tables['sample'], tables['clinical'], sample_ids=dataset.abundance.columns
    )
    dataset = dataset.with_samples(samples)
    raw_abundance = dataset.abundance

    dataset = Normalizer().normalize_dataset(dataset)

    # detection is judged on raw intensities, loess moves undetected cells
    dataset, _ = AbundanceFilter().apply(dataset, reference=raw_abundance)

    print("\nFiltering steps:")
    for step in dataset.steps:
        print(f"   {step}")

    save_bundle(dataset, bundle_path or BUNDLE_FILE)
    return dataset


def run_exploration(dataset: Optional[ProteomicsDataset] = None,
                    bundle_path: Optional[Path] = None,
                    save_figures: bool = True) -> Dict[str, Any]:
    """Run every exploratory analysis on the saved bundle."""
    print("\n=== Clot Proteomics Exploratory Analysis ===")

    if dataset is None:
        dataset = load_bundle(bundle_path or BUNDLE_FILE)

    visualizer = ProteomicsVisualizer()
    results = {}

    pca_result = run_pca(dataset.abundance)
    results['pca'] = pca_result
    print("Variance explained: " + ", ".join(
        f"{pc} {100 * ratio:.1f}%"
        for pc, ratio in pca_result.explained_variance_ratio.head(5).items()
    ))

    try:
        results['umap'] = run_umap(dataset.abundance)
    except DegenerateInputError as e:
        print(f"Skipping UMAP: {e}")

    try:
        correlation_analyzer = MetadataCorrelationAnalyzer()
        results['correlation'] = correlation_analyzer.analyze_correlations(dataset, pca_result)
    except DegenerateInputError as e:
        print(f"Skipping metadata correlation: {e}")

    try:
        results['feature_importance'] = MechanismFeatureImportance().fit(dataset.samples)
    except DegenerateInputError as e:
        print(f"Skipping feature importance: {e}")

    results['top_abundant'] = top_abundant_proteins(dataset.abundance, dataset.annotation)
    results['highly_variable'] = highly_variable_proteins(dataset.abundance, dataset.annotation)
    print(f"Top-abundant proteins shared by >1 sample: {len(results['top_abundant'])}")
    print(f"Highly variable proteins: {len(results['highly_variable'])}")

    RESULTS_DIR.mkdir(parents=True, exist_ok=True)
    pca_result.scores.to_csv(RESULTS_DIR / 'pca_scores.csv')
    if 'correlation' in results:
        results['correlation']['correlations'].to_csv(RESULTS_DIR / 'metadata_pc_spearman.csv')
        results['correlation']['p_values'].to_csv(RESULTS_DIR / 'metadata_pc_pvalues.csv')
    results['top_abundant'].to_csv(RESULTS_DIR / 'top_abundant_proteins.csv', index=False)
    results['highly_variable'].to_csv(RESULTS_DIR / 'highly_variable_proteins.csv')
    if 'feature_importance' in results:
        results['feature_importance'].importance.to_csv(
            RESULTS_DIR / 'feature_importance.csv', index=False
        )

    if save_figures:
        visualizer.pca_plot(pca_result, dataset.samples, hue='Mechanism_Code', save_name='pca')
        if 'umap' in results:
            visualizer.embedding_plot(results['umap'], dataset.samples, hue='Mechanism_Code',
                                      title='UMAP of Normalized Abundance', save_name='umap')
        if 'correlation' in results:
            visualizer.correlation_matrix_plot(results['correlation']['correlations'],
                                               results['correlation']['non_significant'],
                                               save_name='metadata_pc_correlation')
        genes = dataset.annotation['Gene']
        if len(results['top_abundant']) > 0:
            visualizer.abundance_heatmap(dataset.abundance, results['top_abundant']['UniProt_ID'],
                                         labels=genes, title='Top Abundant Proteins',
                                         save_name='top_abundant_heatmap')
        if len(results['highly_variable']) > 0:
            visualizer.abundance_heatmap(dataset.abundance, results['highly_variable'].index,
                                         labels=genes, title='Highly Variable Proteins',
                                         save_name='highly_variable_heatmap')
        if 'feature_importance' in results:
            visualizer.importance_plot(results['feature_importance'].importance,
                                       save_name='feature_importance')
        visualizer.close_all()

    return results


def main():
    """Main function."""
    parser = argparse.ArgumentParser(description='Clot Proteomics Analysis')
    parser.add_argument(
        '--stage',
        choices=['preprocess', 'explore', 'all'],
        help='Pipeline stage to run'
    )
    parser.add_argument(
        '--bundle',
        type=Path,
        default=None,
        help='Path of the normalized dataset bundle'
    )
    parser.add_argument(
        '--no-figures',
        action='store_true',
        help="Don't save figures"
    )

    args = parser.parse_args()

    if not args.stage:
        parser.print_help()
        return 0

    try:
        dataset = None
        if args.stage in ('preprocess', 'all'):
            dataset = run_preprocessing(bundle_path=args.bundle)

        if args.stage in ('explore', 'all'):
            run_exploration(dataset, bundle_path=args.bundle, save_figures=not args.no_figures)

        print("\nAnalysis completed successfully!")

    except (TableLoadError, SchemaError, DegenerateInputError) as e:
        print(f"Error during analysis: {str(e)}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
