"""HTTP API for the Workout Tracker."""
