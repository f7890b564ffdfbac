import json

import matplotlib
matplotlib.use("Agg")

from country.graph_loader import generate_country
from country.optimizer import CountryOptimizer
from experiments.fusion_experiments import plot_metrics, run_fusion_experiments, visualize_fusion


class Test_Unit_Experiments:
    def test_run_fusion_experiments(self, tmp_path):
        results = run_fusion_experiments([4, 5], [2, 5], num_trials=2,
                                         output_dir=str(tmp_path), visualize=False)

        assert set(results) == {"n4", "n5"}
        assert list(results["n4"]) == [2]
        entry = results["n5"][2]
        assert len(entry['runtime']) == 2
        assert len(entry['std_dev_sq']) == 2
        assert entry['avg_explored'] >= 1

        with open(tmp_path / "fusion_results.json", encoding='utf-8') as f:
            saved = json.load(f)
        assert saved["n5"]["2"]["std_dev_sq"] == entry['std_dev_sq']

    def test_plots(self, tmp_path):
        results = run_fusion_experiments([5], [2, 3], num_trials=1,
                                         output_dir=str(tmp_path), visualize=True)
        plot_metrics(results, str(tmp_path))

        assert (tmp_path / "n5" / "fusion_k2.png").exists()
        assert (tmp_path / "n5" / "runtime_vs_k.png").exists()
        assert (tmp_path / "n5" / "pruned_vs_k.png").exists()

    def test_plots_from_saved_results(self, tmp_path):
        run_fusion_experiments([5], [2, 3], num_trials=1,
                               output_dir=str(tmp_path), visualize=False)
        with open(tmp_path / "fusion_results.json", encoding='utf-8') as f:
            saved = json.load(f)

        plot_metrics(saved, str(tmp_path / "reloaded"))

        assert (tmp_path / "reloaded" / "n5" / "explored_vs_k.png").exists()

    def test_visualize_fusion(self, tmp_path):
        country = generate_country(6, seed=1)
        fused = CountryOptimizer(country, workers=1).optimize(3)
        path = tmp_path / "fusion.png"
        visualize_fusion(country, fused, "Fusion", save_path=str(path))
        assert path.exists()
