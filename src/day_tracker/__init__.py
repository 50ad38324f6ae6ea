"""Day-based activity and working time tracker."""
