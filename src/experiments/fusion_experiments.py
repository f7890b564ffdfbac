import os
import time
import json
import numpy as np
from typing import Dict, List, Any, Optional
import networkx as nx
import matplotlib.pyplot as plt

from country.country import Country
from country.evaluation import evaluate_fusion
from country.graph_loader import generate_country, get_country_stats
from country.optimizer import CountryOptimizer


def visualize_fusion(original: Country, fused: Country,
                     title: str, save_path: Optional[str] = None):
    """
    Draw the original country graph, one color per fused region.
    Layout uses a fixed seed so repeated runs are comparable.
    """
    G = original.to_graph()
    pos = nx.spring_layout(G, seed=42, iterations=100)
    plt.figure(figsize=(12, 8))

    regions = list(fused.iter_regions())
    colors = plt.cm.rainbow(np.linspace(0, 1, len(regions)))
    for idx, region in enumerate(regions):
        nx.draw_networkx_nodes(G, pos,
                               nodelist=sorted(region.members),
                               node_color=[colors[idx]],
                               node_size=300,
                               alpha=0.9)

    nx.draw_networkx_edges(G, pos, alpha=0.3, width=1.0)
    nx.draw_networkx_labels(G, pos, font_size=8)
    plt.title(title)

    if save_path:
        plt.savefig(save_path, bbox_inches='tight', dpi=150)
    else:
        plt.show()
    plt.close()


def run_fusion_experiments(
        sizes: List[int],
        target_counts: List[int],
        num_trials: int = 3,
        extra_link_prob: float = 0.2,
        workers: Optional[int] = 1,
        output_dir: str = "results/fusion",
        visualize: bool = True
) -> Dict[str, Any]:
    """
    Run the branch-and-bound search on random connected countries.
    For each size, tries every target count smaller than the size, over
    num_trials seeded countries.
    """
    results = {}

    for size in sizes:
        name = f"n{size}"
        results[name] = {}

        for k in target_counts:
            if not 0 < k < size:
                continue

            print(f"\nProcessing {name} with k={k}")
            entry = {
                'runtime': [],
                'std_dev_sq': [],
                'explored': [],
                'pruned': [],
                'cut_links': [],
            }

            for trial in range(num_trials):
                print(f"  Trial {trial + 1}/{num_trials}")
                country = generate_country(size, extra_link_prob=extra_link_prob, seed=trial)
                optimizer = CountryOptimizer(country, workers=workers)

                start_time = time.time()
                fused = optimizer.optimize(k)
                end_time = time.time()

                metrics = evaluate_fusion(country, fused)
                entry['runtime'].append(end_time - start_time)
                entry['std_dev_sq'].append(metrics['std_dev_sq'])
                entry['explored'].append(optimizer.last_stats.explored)
                entry['pruned'].append(optimizer.last_stats.pruned)
                entry['cut_links'].append(metrics['cut_links'])

                # Only draw the first trial
                if visualize and trial == 0:
                    os.makedirs(os.path.join(output_dir, name), exist_ok=True)
                    visualize_fusion(
                        country,
                        fused,
                        f"Fusion (n={size}, k={k})",
                        save_path=os.path.join(output_dir, name, f"fusion_k{k}.png")
                    )

            if num_trials > 0:
                entry['stats'] = get_country_stats(country)
                for metric in ['runtime', 'std_dev_sq', 'explored', 'pruned']:
                    vals = entry[metric]
                    entry[f'avg_{metric}'] = np.mean(vals)
                    entry[f'std_{metric}'] = np.std(vals)

            results[name][k] = entry

    os.makedirs(output_dir, exist_ok=True)
    out_file = os.path.join(output_dir, "fusion_results.json")
    with open(out_file, "w", encoding='utf-8') as f:
        json_results = json.loads(
            json.dumps(results, default=lambda x: x.item() if hasattr(x, 'item') else x)
        )
        json.dump(json_results, f, indent=2)

    return results


def plot_metrics(results: Dict[str, Any], output_dir: str):
    """
    Plot runtime, explored states and pruned branches against k, per size.
    """
    for name, size_results in results.items():
        # Keys are ints in memory and strings once reloaded from JSON
        k_keys = sorted(size_results.keys(), key=int)
        k_values = [int(k) for k in k_keys]
        if not k_values:
            continue
        os.makedirs(os.path.join(output_dir, name), exist_ok=True)

        for metric in ['runtime', 'explored', 'pruned']:
            plt.figure(figsize=(10, 6))

            values = [size_results[k][f'avg_{metric}'] for k in k_keys]
            errors = [size_results[k][f'std_{metric}'] for k in k_keys]

            plt.errorbar(k_values, values, yerr=errors, marker='o', capsize=4)

            plt.xlabel('Target Region Count (k)')
            plt.ylabel(metric.replace('_', ' ').title())
            plt.title(f'{metric.replace("_", " ").title()} vs k - {name}')
            plt.grid(True)

            save_path = os.path.join(output_dir, name, f'{metric}_vs_k.png')
            plt.savefig(save_path, bbox_inches='tight', dpi=150)
            plt.close()


if __name__ == "__main__":
    sizes = [6, 8, 10]
    target_counts = [2, 3, 4]
    num_trials = 3

    output_dir = "results/fusion"
    os.makedirs(output_dir, exist_ok=True)

    print("\nStarting region fusion experiments...")
    results_data = run_fusion_experiments(sizes, target_counts, num_trials=num_trials,
                                          workers=None, output_dir=output_dir)

    print("\nPlotting metrics...")
    plot_metrics(results_data, output_dir=output_dir)

    print(f"\nExperiments complete. Results and plots are saved to: {output_dir}")
