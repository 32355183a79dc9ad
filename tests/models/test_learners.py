"""
Tests for the built-in learners.

Tests cover:
- Output widths (n_classes for classifiers, 1 for regressors)
- Training folds that miss classes or hold a single class
- Seed injection and parameter aliases
- Score-to-probability mapping for LinearSVC
- Factorization machines on dense and sparse input
- Input validation errors
"""
import numpy as np
import pytest
import scipy.sparse as sp

from stacknet.exceptions import ModelSpecError, NotFittedError, ShapeMismatchError, TargetError
from stacknet.models import ModelRegistry, scores_to_proba
from stacknet.models.factorization.fm import (
    FactorizationMachineClassifier,
    FactorizationMachineRegressor,
    fm_scores,
)


def _build(spec, n_classes=3, seed=1):
    return ModelRegistry.create_from_spec(spec, seed=seed, n_classes=n_classes)


FAST_CLASSIFIERS = [
    "DecisionTreeClassifier",
    "RandomForestClassifier estimators:5 max_depth:3",
    "GradientBoostingForestClassifier estimators:5",
    "AdaboostRandomForestClassifier estimators:2 trees:3",
    "LogisticRegression",
    "LSVC",
    "knnClassifier neighbours:5",
    "NaiveBayesClassifier",
    "KernelmodelClassifier components:20",
    "Vanilla2hnnclassifier h1:8 h2:4 epochs:20",
    "softmaxnnclassifier h1:8 epochs:20",
    "XgboostClassifier estimators:5 max_depth:2",
    "LightgbmClassifier estimators:5 leaves:4 min_leaf:5",
    "LibFmClassifier lfeatures:2 max_iter:3",
]

FAST_REGRESSORS = [
    "DecisionTreeRegressor",
    "RandomForestRegressor estimators:5 max_depth:3",
    "GradientBoostingForestRegressor estimators:5",
    "AdaboostForestRegressor estimators:2 trees:3",
    "LinearRegression",
    "LSVR",
    "knnRegressor neighbours:5",
    "KernelmodelRegressor components:20",
    "Vanilla2hnnregressor h1:8 h2:4 epochs:20",
    "multinnregressor h1:8 h2:4 epochs:20",
    "XgboostRegressor estimators:5 max_depth:2",
    "LightgbmRegressor estimators:5 leaves:4 min_leaf:5",
    "LibFmRegressor lfeatures:2 max_iter:3",
]


# =============================================================================
# OUTPUT WIDTHS
# =============================================================================

@pytest.mark.filterwarnings("ignore")
class TestOutputWidths:
    """Every learner returns a block of the width the layer expects."""

    @pytest.mark.parametrize("spec", FAST_CLASSIFIERS)
    def test_classifier_width(self, spec, multiclass_data):
        X, y = multiclass_data["X_train"], multiclass_data["y_train"]
        model = _build(spec)
        model.set_target(y).fit(X)

        proba = model.predict_proba(multiclass_data["X_test"])
        assert proba.shape == (50, 3)
        assert np.all(np.isfinite(proba))
        np.testing.assert_allclose(proba.sum(axis=1), 1.0, atol=1e-6)

    @pytest.mark.parametrize("spec", FAST_REGRESSORS)
    def test_regressor_width(self, spec, multiclass_data):
        X, y = multiclass_data["X_train"], multiclass_data["y_train"]
        model = _build(spec)
        model.set_target(y).fit(X)

        scores = model.predict_proba(multiclass_data["X_test"])
        assert scores.shape == (50, 1)
        assert model.output_width() == 1

    @pytest.mark.parametrize("spec", [
        "LogisticRegression",
        "XgboostClassifier estimators:5 max_depth:2",
        "LibFmClassifier lfeatures:2 max_iter:3",
    ])
    def test_missing_class_column_is_zero(self, spec, multiclass_data):
        X, y = multiclass_data["X_train"], multiclass_data["y_train"]
        keep = y != 1
        model = _build(spec, n_classes=3)
        model.fit(X[keep], y[keep])

        proba = model.predict_proba(X)
        assert proba.shape == (200, 3)
        np.testing.assert_array_equal(proba[:, 1], 0.0)
        np.testing.assert_allclose(proba.sum(axis=1), 1.0, atol=1e-6)

    def test_single_class_is_constant(self, multiclass_data):
        X = multiclass_data["X_train"][:20]
        model = _build("RandomForestClassifier estimators:5", n_classes=3)
        model.fit(X, np.full(20, 2))

        proba = model.predict_proba(X)
        np.testing.assert_array_equal(proba, np.tile([0.0, 0.0, 1.0], (20, 1)))

    def test_width_without_n_classes_follows_target(self, multiclass_data):
        model = ModelRegistry.create_from_spec("LogisticRegression")
        model.fit(multiclass_data["X_train"], multiclass_data["y_train"])
        assert model.output_width() == 3

    def test_width_unknown_before_fit(self):
        model = ModelRegistry.create_from_spec("LogisticRegression")
        with pytest.raises(NotFittedError):
            model.output_width()


# =============================================================================
# CONFIGURATION
# =============================================================================

class TestConfiguration:
    """Test parameter aliases and seeds."""

    def test_seed_becomes_random_state(self, multiclass_data):
        X, y = multiclass_data["X_train"], multiclass_data["y_train"]
        first = _build("RandomForestClassifier estimators:5", seed=7).fit(X, y)
        second = _build("RandomForestClassifier estimators:5", seed=7).fit(X, y)

        assert first.estimator.random_state == 7
        np.testing.assert_array_equal(first.predict_proba(X), second.predict_proba(X))

    def test_spec_seed_wins(self, multiclass_data):
        model = _build("RandomForestClassifier estimators:5 seed:3", seed=7)
        model.fit(multiclass_data["X_train"], multiclass_data["y_train"])
        assert model.estimator.random_state == 3

    @pytest.mark.parametrize("spec,key,value", [
        ("LogisticRegression maxim_Iteration:50", "max_iter", 50),
        ("LogisticRegression l2_C:0.3", "C", 0.3),
        ("RandomForestClassifier estimators:9", "n_estimators", 9),
        ("RandomForestClassifier min_leaf:4", "min_samples_leaf", 4),
        ("knnClassifier neighbours:3", "n_neighbors", 3),
        ("NaiveBayesClassifier Shrinkage:0.01", "var_smoothing", 0.01),
        ("XgboostClassifier colsample:0.5", "colsample_bytree", 0.5),
        ("LightgbmClassifier leaves:8", "num_leaves", 8),
        ("LibFmClassifier C:0.1", "reg_linear", 0.1),
        ("LibFmClassifier lfeatures:6", "n_factors", 6),
        ("Vanilla2hnnclassifier epochs:5", "max_iter", 5),
        ("KernelmodelClassifier components:30", "n_components", 30),
    ])
    def test_aliases(self, spec, key, value):
        assert ModelRegistry.create_from_spec(spec).config[key] == value

    def test_optional_params_are_dropped(self):
        model = ModelRegistry.create_from_spec("NaiveBayesClassifier seed:1 threads:2 verbose:true")
        assert "random_state" not in model.config
        assert "n_jobs" not in model.config

    def test_set_params_with_mapping(self):
        model = ModelRegistry.create_from_spec("LogisticRegression")
        model.set_params({"C": 2.0})
        assert model.config["C"] == 2.0

    def test_unsupported_param_raises(self):
        model = ModelRegistry.create_from_spec("LogisticRegression")
        with pytest.raises(ModelSpecError, match="depth"):
            model.set_params("LogisticRegression depth:3")

    def test_mlp_hidden_layers(self, multiclass_data):
        two = _build("Vanilla2hnnclassifier h1:6 h2:3 epochs:5")
        two.fit(multiclass_data["X_train"], multiclass_data["y_train"])
        one = _build("softmaxnnclassifier h1:6 epochs:5")
        one.fit(multiclass_data["X_train"], multiclass_data["y_train"])

        assert two.estimator.hidden_layer_sizes == (6, 3)
        assert one.estimator.hidden_layer_sizes == (6,)

    def test_softmax_nn_has_no_second_layer(self):
        with pytest.raises(ModelSpecError):
            ModelRegistry.create_from_spec("softmaxnnclassifier h2:4")

    def test_unknown_kernel_raises(self, multiclass_data):
        model = _build("KernelmodelClassifier kernel:cosine_typo")
        with pytest.raises(ValueError, match="unsupported kernel"):
            model.fit(multiclass_data["X_train"], multiclass_data["y_train"])


# =============================================================================
# TRAINING INPUTS
# =============================================================================

class TestTrainingInputs:
    """Test targets, weights and input layouts."""

    def test_fit_uses_attached_target(self, multiclass_data):
        model = _build("LogisticRegression")
        model.set_target(multiclass_data["y_train"])
        model.fit(multiclass_data["X_train"])
        assert model.is_fitted

    def test_fit_without_target_raises(self, multiclass_data):
        with pytest.raises(TargetError, match="no target"):
            _build("LogisticRegression").fit(multiclass_data["X_train"])

    def test_empty_target_raises(self):
        with pytest.raises(TargetError, match="empty"):
            _build("LogisticRegression").set_target([])

    def test_fractional_class_ids_raise(self, multiclass_data):
        y = multiclass_data["y_train"] + 0.5
        with pytest.raises(TargetError, match="integer class ids"):
            _build("LogisticRegression").fit(multiclass_data["X_train"], y)

    def test_row_mismatch_raises(self, multiclass_data):
        with pytest.raises(ShapeMismatchError):
            _build("LogisticRegression").fit(
                multiclass_data["X_train"], multiclass_data["y_train"][:10]
            )

    def test_predict_before_fit_raises(self, multiclass_data):
        with pytest.raises(NotFittedError):
            _build("LogisticRegression").predict_proba(multiclass_data["X_test"])

    def test_predict_1d_input_raises(self, multiclass_data):
        model = _build("LogisticRegression")
        model.fit(multiclass_data["X_train"], multiclass_data["y_train"])
        with pytest.raises(ShapeMismatchError):
            model.predict_proba(multiclass_data["X_test"][0])

    def test_sample_weights_change_model(self, multiclass_data):
        X, y = multiclass_data["X_train"], multiclass_data["y_train"]
        weights = np.where(y == 0, 5.0, 0.2)

        plain = _build("LogisticRegression").fit(X, y)
        weighted = _build("LogisticRegression").fit(X, y, sample_weights=weights)

        assert weighted.predict_proba(X)[:, 0].mean() > plain.predict_proba(X)[:, 0].mean()

    def test_weights_ignored_when_unsupported(self, multiclass_data):
        X, y = multiclass_data["X_train"], multiclass_data["y_train"]
        model = _build("knnClassifier neighbours:5")
        model.fit(X, y, sample_weights=np.ones(len(y)))
        assert model.predict_proba(X).shape == (200, 3)

    @pytest.mark.parametrize("spec", [
        "LogisticRegression",
        "NaiveBayesClassifier",
        "LibFmClassifier lfeatures:2 max_iter:3",
    ])
    def test_sparse_input(self, spec, multiclass_data):
        X = sp.csr_matrix(multiclass_data["X_train"])
        model = _build(spec)
        model.fit(X, multiclass_data["y_train"])
        assert model.predict_proba(X).shape == (200, 3)


# =============================================================================
# SCORE MAPPING AND FACTORIZATION MACHINES
# =============================================================================

class TestScoresToProba:
    """Test decision-function to probability mapping."""

    def test_binary_margin(self):
        proba = scores_to_proba(np.array([0.0, 2.0, -2.0]))
        assert proba.shape == (3, 2)
        np.testing.assert_allclose(proba[0], [0.5, 0.5])
        assert proba[1, 1] > 0.5 > proba[2, 1]

    def test_multiclass_softmax(self):
        proba = scores_to_proba(np.array([[1.0, 2.0, 3.0], [1000.0, 0.0, 0.0]]))
        np.testing.assert_allclose(proba.sum(axis=1), 1.0)
        assert np.argmax(proba[0]) == 2
        assert np.all(np.isfinite(proba))

    def test_lsvc_binary(self, binary_data):
        model = _build("LSVC", n_classes=2)
        model.fit(binary_data["X_train"], binary_data["y_train"])
        proba = model.predict_proba(binary_data["X_test"])
        assert proba.shape == (40, 2)
        np.testing.assert_allclose(proba.sum(axis=1), 1.0)


class TestFactorizationMachine:
    """Test the SGD factorization machine estimators."""

    def test_scores_include_pairwise_term(self):
        X = np.array([[1.0, 2.0]])
        V = np.array([[1.0], [3.0]])
        # w0 + w.x + <v1, v2> x1 x2 = 0.5 + 1 + 3 * 2
        assert fm_scores(X, 0.5, np.array([1.0, 0.0]), V)[0] == pytest.approx(7.5)

    def test_sparse_matches_dense(self):
        rng = np.random.RandomState(0)
        X = rng.randn(5, 4)
        w, V = rng.randn(4), rng.randn(4, 3)
        np.testing.assert_allclose(
            fm_scores(sp.csr_matrix(X), 0.1, w, V),
            fm_scores(X, 0.1, w, V),
        )

    def test_binary_classifier_learns(self, binary_data):
        fm = FactorizationMachineClassifier(n_factors=2, max_iter=50, random_state=0)
        fm.fit(binary_data["X_train"], binary_data["y_train"])
        accuracy = np.mean(fm.predict(binary_data["X_train"]) == binary_data["y_train"])
        assert len(fm.machines_) == 1
        assert accuracy > 0.75

    def test_multiclass_one_vs_rest(self, multiclass_data):
        fm = FactorizationMachineClassifier(n_factors=2, max_iter=3, random_state=0)
        fm.fit(multiclass_data["X_train"], multiclass_data["y_train"])
        proba = fm.predict_proba(multiclass_data["X_test"])
        assert len(fm.machines_) == 3
        np.testing.assert_allclose(proba.sum(axis=1), 1.0)

    @pytest.mark.filterwarnings("ignore::RuntimeWarning")
    def test_divergence_raises(self, multiclass_data):
        X = multiclass_data["X_train"] * 100
        fm = FactorizationMachineRegressor(learning_rate=10.0, max_iter=50, random_state=0)
        with pytest.raises(ValueError, match="diverged"):
            fm.fit(X, multiclass_data["y_train"])

    def test_regressor_is_deterministic(self, multiclass_data):
        X, y = multiclass_data["X_train"], multiclass_data["y_train"]
        first = FactorizationMachineRegressor(max_iter=3, learning_rate=0.01, random_state=4).fit(X, y)
        second = FactorizationMachineRegressor(max_iter=3, learning_rate=0.01, random_state=4).fit(X, y)
        np.testing.assert_array_equal(first.predict(X), second.predict(X))
