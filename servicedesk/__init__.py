"""Service desk ticket tracker."""
