"""CleanBook - booking scheduling, slot capacity and cancellation fee engine"""
