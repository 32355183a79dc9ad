"""
Tests for StackNetClassifier - end-to-end training and scoring.

Tests cover:
- Training flow and output shapes
- Label handling (numeric and text labels)
- Restacking widths
- Configuration errors raised before training
- Determinism
- Sparse and DataFrame input
- Single-row scoring
- Dumps, save/load, reset
"""
import numpy as np
import pandas as pd
import pytest
import scipy.sparse as sp

from stacknet import StackNetClassifier, StackNetConfig
from stacknet.ensemble import EnsemblePredictor, StackNetTrainer
from stacknet.ensemble.trainer import normalize_weights
from stacknet.exceptions import (
    ConfigError,
    ConfigurationError,
    ConfigValidationError,
    ModelSpecError,
    NotFittedError,
    ShapeMismatchError,
    TargetError,
    TerminalRegressorError,
    TrainingAbortedError,
)


@pytest.fixture
def trained_clf(multiclass_data, fast_layers):
    """StackNet fitted on the 3-class training set."""
    clf = StackNetClassifier(layers=fast_layers, folds=3, seed=1)
    return clf.fit(multiclass_data["X_train"], multiclass_data["y_train"])


# =============================================================================
# TRAINING AND SCORING
# =============================================================================

class TestTrainingFlow:
    """Test fitting and probability output."""

    def test_layer_widths(self, trained_clf):
        ensemble = trained_clf.ensemble
        assert ensemble.column_counts == (6, 3)
        assert ensemble.report.layer_input_widths == [10, 6]
        assert [layer.output_width for layer in ensemble.layers] == [6, 3]
        assert trained_clf.n_features == 10
        assert trained_clf.n_classes == 3

    def test_predict_proba(self, trained_clf, multiclass_data):
        proba = trained_clf.predict_proba(multiclass_data["X_test"])
        assert proba.shape == (50, 3)
        assert np.all(proba >= 0)
        np.testing.assert_allclose(proba.sum(axis=1), 1.0, atol=1e-9)

    def test_learns_the_signal(self, trained_clf, multiclass_data):
        predictions = trained_clf.predict(multiclass_data["X_test"])
        assert np.mean(predictions == multiclass_data["y_test"]) > 0.6

    def test_predict_returns_original_labels(self, multiclass_data, fast_layers):
        y = np.array([10, 20, 30])[multiclass_data["y_train"]]
        clf = StackNetClassifier(layers=fast_layers, folds=3).fit(multiclass_data["X_train"], y)

        assert clf.get_classes() == ["10", "20", "30"]
        assert set(np.unique(clf.predict(multiclass_data["X_test"]))) <= {10, 20, 30}

    def test_numeric_text_labels_follow_value_order(self, multiclass_data, fast_layers):
        y = np.array(["2", "10", "1"])[multiclass_data["y_train"]]
        clf = StackNetClassifier(layers=fast_layers, folds=3).fit(multiclass_data["X_train"], y)

        assert clf.get_classes() == ["1", "2", "10"]
        assert set(np.unique(clf.predict(multiclass_data["X_test"]))) <= {1, 2, 10}

    def test_text_labels_are_reported_as_ids(self, multiclass_data, fast_layers):
        y = np.array(["low", "mid", "high"])[multiclass_data["y_train"]]
        clf = StackNetClassifier(layers=fast_layers, folds=3).fit(multiclass_data["X_train"], y)

        assert clf.get_classes() == ["high", "low", "mid"]
        assert set(np.unique(clf.predict(multiclass_data["X_test"]))) <= {0, 1, 2}

    def test_binary_problem(self, binary_data):
        clf = StackNetClassifier(
            layers=[["RandomForestClassifier estimators:10", "LogisticRegression"],
                    ["LogisticRegression"]],
            folds=3,
        ).fit(binary_data["X_train"], binary_data["y_train"])

        assert clf.ensemble.column_counts == (2, 2)
        assert clf.predict_proba(binary_data["X_test"]).shape == (40, 2)

    def test_multiple_terminal_models_are_summed(self, multiclass_data):
        clf = StackNetClassifier(
            layers=[["LogisticRegression"],
                    ["LogisticRegression", "RandomForestClassifier estimators:5"]],
            folds=3,
        ).fit(multiclass_data["X_train"], multiclass_data["y_train"])

        predictor = EnsemblePredictor(clf.ensemble)
        terminal = predictor.terminal_scores(multiclass_data["X_test"])
        assert terminal.shape == (50, 6)
        expected = terminal[:, :3] + terminal[:, 3:]
        expected /= expected.sum(axis=1, keepdims=True)
        np.testing.assert_allclose(clf.predict_proba(multiclass_data["X_test"]), expected)

    def test_three_layers_with_regressors(self, multiclass_data):
        clf = StackNetClassifier(
            layers=[
                ["RandomForestClassifier estimators:5", "LinearRegression"],
                ["LogisticRegression", "DecisionTreeRegressor max_depth:3"],
                ["LogisticRegression"],
            ],
            folds=3,
        ).fit(multiclass_data["X_train"], multiclass_data["y_train"])

        assert clf.ensemble.column_counts == (4, 4, 3)
        assert clf.predict_proba(multiclass_data["X_test"]).shape == (50, 3)

    def test_binary_auc_terminal_regressors(self, binary_data):
        clf = StackNetClassifier(
            layers=[["LogisticRegression"],
                    ["LinearRegression", "DecisionTreeRegressor max_depth:2"]],
            folds=3,
            metric="auc",
            verbose=True,
        ).fit(binary_data["X_train"], binary_data["y_train"])

        assert clf.ensemble.column_counts == (1, 2)
        assert {s.metric for s in clf.report.fold_scores} == {"auc"}

    def test_sample_weights(self, multiclass_data, fast_layers):
        X, y = multiclass_data["X_train"], multiclass_data["y_train"]
        weights = np.where(y == 2, 3.0, 1.0)
        clf = StackNetClassifier(layers=fast_layers, folds=3).fit(X, y, sample_weights=weights)
        assert clf.predict_proba(X).shape == (200, 3)

    def test_report(self, multiclass_data, fast_layers):
        clf = StackNetClassifier(layers=fast_layers, folds=3, verbose=True)
        report = clf.fit(multiclass_data["X_train"], multiclass_data["y_train"]).report
        assert len(report.fold_scores) == 3 * 2
        assert set(report.mean_scores()) == {(1, 0), (1, 1)}
        assert len(report.layer_times) == 2
        assert report.training_time_seconds > 0
        assert report.to_dict()["fold_scores"][0]["level"] == 1

    def test_quiet_report_has_no_fold_scores(self, trained_clf):
        assert trained_clf.report.fold_scores == []
        assert trained_clf.report.mean_scores() == {}
        assert len(trained_clf.report.layer_times) == 2


class TestRestacking:
    """Test restacked layer inputs."""

    def test_restacking_widths(self, multiclass_data, fast_layers):
        clf = StackNetClassifier(layers=fast_layers, folds=3, restacking=True)
        clf.fit(multiclass_data["X_train"], multiclass_data["y_train"])

        assert clf.ensemble.report.layer_input_widths == [10, 16]
        assert clf.predict_proba(multiclass_data["X_test"]).shape == (50, 3)

    def test_restacking_accumulates(self, multiclass_data):
        clf = StackNetClassifier(
            layers=[["LogisticRegression"], ["LinearRegression"], ["LogisticRegression"]],
            folds=3,
            restacking=True,
        ).fit(multiclass_data["X_train"], multiclass_data["y_train"])

        assert clf.ensemble.report.layer_input_widths == [10, 13, 14]


# =============================================================================
# ERRORS
# =============================================================================

class TestErrors:
    """Test errors raised before or instead of training."""

    def test_single_layer_raises(self):
        with pytest.raises(ConfigurationError, match="at least 2 layers"):
            StackNetClassifier(layers=[["LogisticRegression"]])

    def test_invalid_settings_are_collected(self):
        with pytest.raises(ConfigValidationError) as excinfo:
            StackNetClassifier(layers=[["LogisticRegression"]] * 2, folds=1, metric="f1")
        assert len(excinfo.value.errors) == 2

    def test_terminal_regressor_raises(self, multiclass_data):
        clf = StackNetClassifier(
            layers=[["LogisticRegression"], ["LinearRegression"]], metric="logloss"
        )
        with pytest.raises(TerminalRegressorError):
            clf.fit(multiclass_data["X_train"], multiclass_data["y_train"])
        assert not clf.is_fitted

    def test_unknown_model_raises_before_training(self, multiclass_data):
        clf = StackNetClassifier(layers=[["LogisticRegression"], ["NoSuchModel"]])
        with pytest.raises(ModelSpecError):
            clf.fit(multiclass_data["X_train"], multiclass_data["y_train"])

    def test_target_row_mismatch_raises(self, multiclass_data, fast_layers):
        with pytest.raises(ShapeMismatchError, match="Target length"):
            StackNetClassifier(layers=fast_layers).fit(
                multiclass_data["X_train"], multiclass_data["y_train"][:100]
            )

    def test_single_class_target_raises(self, multiclass_data, fast_layers):
        with pytest.raises(TargetError):
            StackNetClassifier(layers=fast_layers).fit(multiclass_data["X_train"], np.zeros(200))

    def test_more_folds_than_rows_raises(self, fast_layers):
        X = np.random.RandomState(0).randn(4, 3)
        with pytest.raises(ConfigurationError, match="Cannot split"):
            StackNetClassifier(layers=fast_layers, folds=5).fit(X, [0, 1, 0, 1])

    def test_predict_before_fit_raises(self, fast_layers, multiclass_data):
        clf = StackNetClassifier(layers=fast_layers)
        with pytest.raises(NotFittedError, match="needs to be fitted"):
            clf.predict_proba(multiclass_data["X_test"])
        with pytest.raises(NotFittedError):
            clf.get_classes()

    def test_feature_count_mismatch_raises(self, trained_clf, multiclass_data):
        with pytest.raises(ShapeMismatchError, match="Number of predictors"):
            trained_clf.predict_proba(multiclass_data["X_test"][:, :5])

    def test_non_finite_terminal_scores_raise(self, nan_model, multiclass_data):
        clf = StackNetClassifier(layers=[["LogisticRegression"], [nan_model]], folds=3)
        clf.fit(multiclass_data["X_train"], multiclass_data["y_train"])
        with pytest.raises(TrainingAbortedError, match="non-finite") as excinfo:
            clf.predict_proba(multiclass_data["X_test"])
        assert excinfo.value.level == 2
        assert excinfo.value.spec == nan_model
        with pytest.raises(TrainingAbortedError):
            clf.predict(multiclass_data["X_test"])

    def test_non_finite_hidden_layer_aborts_fit(self, nan_model, multiclass_data):
        clf = StackNetClassifier(layers=[[nan_model], ["LogisticRegression"]], folds=3)
        with pytest.raises(TrainingAbortedError):
            clf.fit(multiclass_data["X_train"], multiclass_data["y_train"])
        assert not clf.is_fitted

    def test_predictor_without_ensemble_raises(self):
        with pytest.raises(NotFittedError):
            EnsemblePredictor(None).predict_proba(np.ones((2, 2)))


class TestSampleWeights:
    """Test weight normalization."""

    def test_rescaled_to_row_count(self):
        weights = normalize_weights([1.0, 3.0], 2)
        np.testing.assert_allclose(weights, [0.5, 1.5])

    def test_none_passes_through(self):
        assert normalize_weights(None, 5) is None

    @pytest.mark.parametrize("weights", [[1.0, -1.0], [1.0, np.inf], [0.0, 0.0]])
    def test_invalid_weights_raise(self, weights):
        with pytest.raises(TargetError):
            normalize_weights(weights, 2)

    def test_length_mismatch_raises(self):
        with pytest.raises(ShapeMismatchError):
            normalize_weights([1.0], 2)


# =============================================================================
# DETERMINISM AND INPUT LAYOUTS
# =============================================================================

class TestDeterminism:
    """Same data, config and seed give the same probabilities."""

    def test_repeat_fit(self, multiclass_data, fast_layers):
        X, y = multiclass_data["X_train"], multiclass_data["y_train"]
        first = StackNetClassifier(layers=fast_layers, folds=3, seed=5).fit(X, y)
        second = StackNetClassifier(layers=fast_layers, folds=3, seed=5, threads=3).fit(X, y)

        np.testing.assert_array_equal(
            first.predict_proba(multiclass_data["X_test"]),
            second.predict_proba(multiclass_data["X_test"]),
        )

    def test_trainer_matches_classifier(self, multiclass_data, fast_layers):
        X, y = multiclass_data["X_train"], multiclass_data["y_train"]
        config = StackNetConfig(layers=fast_layers, folds=3)
        ensemble = StackNetTrainer(config).fit(X, y)
        clf = StackNetClassifier(config=config).fit(X, y)

        np.testing.assert_array_equal(
            EnsemblePredictor(ensemble).predict_proba(X), clf.predict_proba(X)
        )


class TestInputLayouts:
    """Test sparse and DataFrame inputs."""

    def test_sparse_matches_dense(self, multiclass_data):
        layers = [["LogisticRegression"], ["LogisticRegression"]]
        X, y = multiclass_data["X_train"], multiclass_data["y_train"]
        dense = StackNetClassifier(layers=layers, folds=3).fit(X, y)
        sparse = StackNetClassifier(layers=layers, folds=3).fit(sp.csr_matrix(X), y)

        np.testing.assert_allclose(
            dense.predict_proba(X), sparse.predict_proba(sp.csr_matrix(X)), atol=1e-3
        )

    def test_sparse_restacking(self, multiclass_data, fast_layers):
        X = sp.csr_matrix(multiclass_data["X_train"])
        clf = StackNetClassifier(layers=fast_layers, folds=3, restacking=True)
        clf.fit(X, multiclass_data["y_train"])
        assert clf.predict_proba(X).shape == (200, 3)

    def test_dataframe(self, trained_clf, multiclass_data):
        frame = pd.DataFrame(multiclass_data["X_test"])
        np.testing.assert_array_equal(
            trained_clf.predict_proba(frame),
            trained_clf.predict_proba(multiclass_data["X_test"]),
        )


class TestRowScoring:
    """Test single-row scoring."""

    def test_row_matches_batch(self, trained_clf, multiclass_data):
        X_test = multiclass_data["X_test"]
        batch = trained_clf.predict_proba(X_test)
        for i in range(3):
            np.testing.assert_allclose(trained_clf.predict_proba_row(X_test[i]), batch[i])

    def test_predict_row_matches_batch(self, trained_clf, multiclass_data):
        X_test = multiclass_data["X_test"]
        labels = trained_clf.predict(X_test)
        for i in range(3):
            assert trained_clf.predict_row(X_test[i]) == labels[i]

    def test_sparse_row(self, trained_clf, multiclass_data):
        row = sp.csr_matrix(multiclass_data["X_test"][:1])
        assert trained_clf.predict_proba_row(row).shape == (3,)


# =============================================================================
# DUMPS, PERSISTENCE, STATE
# =============================================================================

class TestDumps:
    """Test per-layer CSV dumps."""

    def test_train_and_test_dumps(self, multiclass_data, fast_layers, tmp_path):
        clf = StackNetClassifier(
            layers=fast_layers, folds=3, dump=True, dump_prefix="run", dump_dir=str(tmp_path)
        ).fit(multiclass_data["X_train"], multiclass_data["y_train"])

        train_dump = pd.read_csv(tmp_path / "run1.csv", header=None)
        assert train_dump.shape == (200, 6)
        assert not (tmp_path / "run2.csv").exists()

        clf.predict_proba(multiclass_data["X_test"])
        assert pd.read_csv(tmp_path / "run_test1.csv", header=None).shape == (50, 6)
        assert pd.read_csv(tmp_path / "run_test2.csv", header=None).shape == (50, 3)


class TestPersistence:
    """Test save/load."""

    def test_round_trip(self, trained_clf, multiclass_data, tmp_path):
        path = trained_clf.save(tmp_path / "models" / "stacknet.joblib")
        loaded = StackNetClassifier.load(path)

        assert loaded.is_fitted
        assert loaded.get_classes() == trained_clf.get_classes()
        assert loaded.config == trained_clf.config
        np.testing.assert_array_equal(
            loaded.predict_proba(multiclass_data["X_test"]),
            trained_clf.predict_proba(multiclass_data["X_test"]),
        )

    def test_save_unfitted_raises(self, fast_layers, tmp_path):
        with pytest.raises(NotFittedError):
            StackNetClassifier(layers=fast_layers).save(tmp_path / "model.joblib")

    def test_load_missing_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            StackNetClassifier.load(tmp_path / "missing.joblib")

    def test_load_foreign_file_raises(self, tmp_path):
        import joblib

        path = tmp_path / "other.joblib"
        joblib.dump({"weights": [1, 2, 3]}, path)
        with pytest.raises(ConfigError):
            StackNetClassifier.load(path)


class TestState:
    """Test reset, describe and repr."""

    def test_reset(self, trained_clf):
        assert trained_clf.reset() is trained_clf
        assert not trained_clf.is_fitted
        with pytest.raises(NotFittedError):
            trained_clf.ensemble

    def test_describe(self, trained_clf, fast_layers):
        info = trained_clf.describe()
        assert info["layers"] == fast_layers
        assert info["fitted"] is True
        assert info["classes"] == ["0", "1", "2"]
        assert info["column_counts"] == [6, 3]

    def test_describe_unfitted(self, fast_layers):
        info = StackNetClassifier(layers=fast_layers).describe()
        assert info["fitted"] is False
        assert "classes" not in info

    def test_repr(self, trained_clf):
        assert repr(trained_clf) == "StackNetClassifier(layers=2, models=3, fitted=True)"
