# mopmc

Multi-objective model checking for Markov decision processes (MDPs) with
total-reward objectives. Given an MDP with several reward objectives, `mopmc`
answers two kinds of question:

* **Achievability**: can one scheduler meet every objective's threshold at the
  same time? (`mopmc.achievability.AchievabilityQuery`)
* **Convex queries**: which achievable point minimises a convex function, such
  as a distance to a target vector, optionally under the threshold
  constraints? (`mopmc.convex_query.ConvexQuery`)

Both queries collect Pareto vertices. Each vertex comes from a weighted value
iteration over the model (`mopmc.value_iteration.ValueIterationHandler`). The
queries then refine their answer with geometric tools:

* `mopmc.separation.find_maximum_separating_direction` finds a weight vector on
  the probability simplex that separates a threshold point from the vertices
  with the largest margin. It solves a linear program and raises
  `SeparationError` when the program cannot be solved.
* `mopmc.halfspaces` works on intersections of halfspaces `{x : w . x <= w . r}`:
  * `find_non_exterior_point` returns a point of the intersection, or `None`
    when the intersection is empty. It raises `NumericalFailure` when the
    linear program fails.
  * `verify_point_in_halfspaces` and `check_non_exterior_point` test whether a
    point lies in the intersection.
* `mopmc.frank_wolfe.FrankWolfeMethod` minimises a convex function over the
  convex hull of a vertex set. It takes simplex gradient steps
  (`FWOption.SIMPLEX_GD`) or forward/away steps (`FWOption.AWAY_STEP`).
* `mopmc.minimum_norm_point.MinimumNormPoint` finds the point of a vertex hull
  nearest to a pivot and returns a `SeparationOutcome` with:
  * `direction`, which points from the hull point towards the pivot;
  * `optimum`, the hull point;
  * `separated`, which tells whether a separating hyperplane was reached.

  It is the inner optimiser that `ConvexQuery` expects.
* `mopmc.projected_gradient.ProjectedGradient` runs projected gradient descent
  inside an intersection of halfspaces. It is the outer optimiser that
  `ConvexQuery` expects. The module also provides `halfspace_projection` and
  `dykstras_projection`.

`mopmc.printer.format_vector` and `print_vector` render vectors in the
bracketed form `label: [a b c]` that the query reports use.

## Installation

```
pip install .
```

To install with the test dependencies:

```
pip install ".[test]"
```

## Describing a model

A `mopmc.query_data.QueryData` holds the model and the objectives:

* `transition_matrix`: a sparse matrix with one row per choice and one column
  per state.
* `row_group_indices`: `col_count + 1` offsets that give the rows of each
  state.
* `scheduler`: the initial choice offset for each state.
* `reward_vectors`: one reward per row for each objective.
* `thresholds` and `is_threshold_upper_bound`: the bound on each objective and
  whether it is an upper or a lower bound.
* `row_count`, `col_count`, `objective_count` and `initial_row`. The
  `initial_row` is the state whose values are reported.

The example below has two states. State 0 has two choices, and each choice
earns reward in a different objective. State 1 is absorbing.

```python
from scipy import sparse
from mopmc.query_data import QueryData

data = QueryData(
    transition_matrix=sparse.csr_matrix([[0.0, 1.0], [0.0, 1.0], [0.0, 1.0]]),
    reward_vectors=[[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]],
    thresholds=[0.4, 0.4],
    is_threshold_upper_bound=[False, False],
    row_group_indices=[0, 2, 3],
    scheduler=[0, 0],
    row_count=3,
    col_count=2,
    objective_count=2,
    initial_row=0,
)
```

## Achievability queries

```python
from mopmc.achievability import AchievabilityQuery
from mopmc.value_iteration import ValueIterationHandler

query = AchievabilityQuery(data, ValueIterationHandler(data))
query.query()
print(query.result(), query.main_loop_iteration_count())
query.print_result()
```

The query runs at most 20 iterations. It stops early when the separation
margin is no longer positive, or when a vertex shows that the thresholds
cannot be met.

## Convex queries

You supply the convex function by subclassing
`mopmc.base_optimizer.ConvexFunction`, which needs `value` and `subgradient`.
`MinimumNormPoint` takes a factory that builds the function from a pivot
point. Both optimisers use `mopmc.base_optimizer.LineSearcher` by default.

```python
import numpy as np
from mopmc.base_optimizer import ConvexFunction
from mopmc.convex_query import ConvexQuery
from mopmc.minimum_norm_point import MinimumNormPoint
from mopmc.projected_gradient import ProjectedGradient
from mopmc.value_iteration import ValueIterationHandler


class SquaredDistance(ConvexFunction):
    def __init__(self, target):
        self.target = np.asarray(target, dtype=float)

    def value(self, x):
        return float(np.sum((np.asarray(x, dtype=float) - self.target) ** 2))

    def subgradient(self, x):
        return 2.0 * (np.asarray(x, dtype=float) - self.target)


target = [0.5, 0.5]
fn = SquaredDistance(target)
query = ConvexQuery(
    data,
    fn,
    MinimumNormPoint(SquaredDistance),
    ProjectedGradient(SquaredDistance(target)),
    ValueIterationHandler(data),
    True,
)
query.query()
print(query.inner_optimal_point(), query.outer_optimal_point())
print(query.inner_optimal_value(), query.outer_optimal_value())
query.print_result()
```

The query works on its own copy of the data. After a run:

* `query.data.collection_of_schedulers` holds the scheduler found at each
  iteration.
* `query.data.scheduler_distribution` holds the weights that the inner
  optimiser gives to the vertices. `query.vertex_weights()` returns the same
  weights.

With `with_constraint` set to `False`, the thresholds are not added as
halfspaces.

## What the package does not do

* It does not read or build models from modelling languages or files. A
  `QueryData` must be filled in by the caller.
* It has no command-line program.
* It ships no concrete convex functions. You write your own `ConvexFunction`
  subclasses.
* `mopmc.query_data.QueryOptions` and its enums are plain records. Nothing in
  the package acts on them.
* Value iteration runs only on the CPU, with numpy and scipy.

## Running the tests

```
pytest
```